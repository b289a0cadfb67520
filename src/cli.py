"""
Command-line interface for the Chocolate Corner shop.

This script wires a ``ShopCoordinator`` into an interactive menu loop.  It
prompts for input, keeps asking until the answer is valid, calls the
coordinator and prints the results.  All retry-until-valid input handling
lives here so the coordinator only ever sees validated values.
"""

import logging
import sys
from typing import Optional

from config import ShopSettings
from errors import FailureReason
from logging_config import configure_logging
from shop import ShopCoordinator

WELCOME_BANNER = "\n".join([
    "><><><><><><><><><><><><><><><><><><><><><><><>",
    "*                                             *",
    "*    WELCOME TO THE CHOCOLATE CORNER          *",
    "*                                             *",
    "><><><><><><><><><><><><><><><><><><><><><><><>",
])

GOODBYE_BANNER = "\n".join([
    ">>>>><<<<<>>>>><<<<<>>>>><<<<<>>>>><<<<<>>>>><<<<<>>>>><<<<<",
    ">      Thank you for visiting the Chocolate Corner!        <",
    ">         God Bless and Come Again! Goodbye! >.<           <",
    ">>>>><<<<<>>>>><<<<<>>>>><<<<<>>>>><<<<<>>>>><<<<<>>>>><<<<<",
])

FAILURE_MESSAGES = {
    FailureReason.USER_CANCELLED: "Order cancelled.",
    FailureReason.PAYMENT_DECLINED: "Payment failed. Please try again later.",
}


def get_string_input(prompt: str) -> str:
    """Ask until a non-empty answer is given."""
    while True:
        answer = input(prompt).strip()
        if answer:
            return answer


def get_int_input(prompt: str, minimum: int = 1, maximum: Optional[int] = None) -> int:
    """Ask until a whole number within ``[minimum, maximum]`` is given."""
    while True:
        raw = input(prompt).strip()
        try:
            number = int(raw)
        except ValueError:
            number = None
        if number is not None and number >= minimum and (maximum is None or number <= maximum):
            return number
        if maximum is None:
            print(f"Please enter a valid number of at least {minimum}.")
        else:
            print(f"Please enter a valid number between {minimum} and {maximum}.")


def show_catalog(shop: ShopCoordinator) -> None:
    print("Welcome to the Chocolate Shop! Here are the available chocolates:")
    for listing in shop.list_catalog():
        print(f"{listing.index}. {listing.formatted_info}")
        print()


def take_order(shop: ShopCoordinator) -> None:
    show_catalog(shop)
    count = len(shop.catalog)
    choice = get_int_input(
        f"Please enter the number of the chocolate you want to buy (1-{count}): ", 1, count
    )
    entry = shop.entry_at(choice)
    print(f"\nYou selected: {entry.display_name}")
    print(entry.describe())
    if entry.flavor_description:
        print(f"Flavor: {entry.flavor_description}")

    quantity = get_int_input(f"How many pieces of {entry.display_name} would you like to buy?: ", 1)
    quote = shop.quote(choice, quantity)
    if not quote.success:
        print(quote.message)
        return

    print(f"Total price for {quantity} pieces of {entry.display_name}: ${quote.price:.2f}")
    answer = get_string_input("Do you want to proceed with payment? (yes / no): ").lower()
    confirmed = answer in ("yes", "y")
    if confirmed:
        print(f"Processing payment of ${quote.price:.2f}...")
    result = shop.confirm_and_charge(choice, quantity, confirmed)
    if result.success:
        print()
        print(result.order.summary())
        print("\nThank you for your purchase! Enjoy your chocolate!")
    else:
        print(FAILURE_MESSAGES.get(result.failure_reason, result.message))


def show_inventory(shop: ShopCoordinator) -> None:
    print("\nCurrent Inventory:")
    names = {entry.id: entry.display_name for entry in shop.catalog}
    for entry_id, qty in shop.inventory_snapshot().items():
        print(f"- {names.get(entry_id, entry_id)}: {qty} pieces")
    print()


def show_order_history(shop: ShopCoordinator) -> None:
    print("\nPrevious Orders:")
    orders = shop.order_history()
    if not orders:
        print("No previous orders found.")
        return
    for order in orders:
        print(f"- #{order.sequence_number} {order.display_name}: {order.quantity} pieces | "
              f"Total Price: ${order.total_charged:.2f}")
    print()


def print_menu() -> None:
    print("\nMenu:")
    print("1. View chocolates and place order")
    print("2. View inventory (Admin)")
    print("3. View previous orders")
    print("4. Exit")
    print()


def interactive_cli(shop: Optional[ShopCoordinator] = None) -> None:
    """Run the menu loop until the user chooses to exit."""
    if shop is None:
        settings = ShopSettings.from_env()
        configure_logging(settings, console_level=logging.WARNING)
        shop = ShopCoordinator.create_default(settings)

    print(WELCOME_BANNER)
    print()
    while True:
        print_menu()
        option = get_int_input("Please select an option (1-4): ", 1, 4)
        print()
        if option == 1:
            take_order(shop)
        elif option == 2:
            show_inventory(shop)
        elif option == 3:
            show_order_history(shop)
        else:
            print(GOODBYE_BANNER)
            break


def main() -> None:
    try:
        interactive_cli()
    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted by user. Exiting.")
        sys.exit(0)


if __name__ == "__main__":
    main()

import logging
from typing import List

from mobile_e2e.appium.locators import PlatformLocator
from .base_page import BasePage, android_resource_id, parse_count

logger = logging.getLogger(__name__)

MAX_CART_ITEMS = 50


class CartPage(BasePage):
    LOCATORS = {
        "cart_screen": PlatformLocator(android_resource_id("cartTV"), "~Cart Screen"),
        "cart_content": PlatformLocator("~Manages scrolling of views in given screen", "~cart content"),
        "product_row": PlatformLocator("~Displays selected product", "~Product Row"),
        "product_title": PlatformLocator(android_resource_id("titleTV"), "~Product Title"),
        "product_price": PlatformLocator(android_resource_id("priceTV"), "~Product Price"),
        "counter_plus_button": PlatformLocator("~Increase item quantity", "~counter plus button"),
        "counter_minus_button": PlatformLocator("~Decrease item quantity", "~counter minus button"),
        "counter_amount": PlatformLocator(android_resource_id("noTV"), "~counter amount"),
        "remove_item": PlatformLocator("~Removes product from cart", "~remove item"),
        "total_price": PlatformLocator(android_resource_id("totalPriceTV"), "~total price"),
        "total_number": PlatformLocator(android_resource_id("itemsTV"), "~total number"),
        "proceed_to_checkout": PlatformLocator("~Confirms products for checkout", "~Proceed To Checkout button"),
        "go_shopping": PlatformLocator('//android.widget.Button[@text="Go Shopping"]', "~Go Shopping button"),
        "no_items_text": PlatformLocator(
            '//android.widget.TextView[@text="No Items"]',
            '**/XCUIElementTypeStaticText[`label == "No Items"`]',
        ),
        "back_button": PlatformLocator("~View menu", "~Navigate back"),
        "cart_items_count": PlatformLocator("~cart items count", "~cart items count"),
    }

    def wait_for_page_load(self) -> None:
        self.wait_for_visible(self.loc("cart_screen"), 30)

    def is_page_displayed(self) -> bool:
        return self.element_exists(self.loc("cart_screen"))

    def is_cart_empty(self) -> bool:
        """An empty cart offers the Go Shopping button."""
        return self.element_exists(self.loc("go_shopping"))

    def get_item_count(self) -> int:
        return self.mobile.count_visible(self.loc("product_row"))

    def get_total_price(self) -> str:
        return self.get_text(self.loc("total_price"))

    def get_total_items_label(self) -> str:
        return self.get_text(self.loc("total_number"))

    def checkout(self) -> None:
        self.wait_for_visible(self.loc("proceed_to_checkout"), 5)
        self.tap(self.loc("proceed_to_checkout"))

    def go_shopping(self) -> None:
        self.tap(self.loc("go_shopping"))

    def remove_first_item(self) -> None:
        self.tap(self.loc("remove_item"))

    def remove_item_at_index(self, index: int) -> None:
        self.tap(self.loc("remove_item").nth(index))

    def increase_first_item_quantity(self) -> None:
        self.tap(self.loc("counter_plus_button"))

    def decrease_first_item_quantity(self) -> None:
        self.tap(self.loc("counter_minus_button"))

    def get_first_item_quantity(self) -> int:
        return parse_count(self.get_text(self.loc("counter_amount")), 1)

    def get_first_item_name(self) -> str:
        return self.get_text(self.loc("product_title"))

    def get_all_item_names(self) -> List[str]:
        title = self.loc("product_title")
        count = self.mobile.count_visible(title)
        return [self.get_text(title.nth(index)) for index in range(count)]

    def go_back(self) -> None:
        self.tap(self.loc("back_button"))

    def clear_cart(self) -> int:
        """Remove items one by one until the cart is empty. Returns how many were removed."""
        removed = 0
        while removed < MAX_CART_ITEMS and not self.is_cart_empty():
            if self.get_item_count() == 0:
                break
            self.remove_first_item()
            removed += 1
            self.pause(0.5)
        logger.info(f"Removed {removed} items from cart")
        return removed

    def scroll_down(self) -> None:
        self.gestures.swipe_up(0.3)

    def is_checkout_enabled(self) -> bool:
        return self.element_exists(self.loc("proceed_to_checkout"))

from typing import List

from mobile_e2e.appium.locators import PlatformLocator
from .base_page import BasePage, android_resource_id, parse_count

SORT_OPTIONS = {
    "name_asc": PlatformLocator('//android.widget.TextView[@text="Name - Ascending"]', "~nameAsc"),
    "name_desc": PlatformLocator('//android.widget.TextView[@text="Name - Descending"]', "~nameDesc"),
    "price_asc": PlatformLocator('//android.widget.TextView[@text="Price - Ascending"]', "~priceAsc"),
    "price_desc": PlatformLocator('//android.widget.TextView[@text="Price - Descending"]', "~priceDesc"),
}


class ProductsPage(BasePage):
    """Catalog screen shown on launch."""

    LOCATORS = {
        "products_screen": PlatformLocator("~Displays all products of catalog", "~title"),
        "store_item": PlatformLocator("~Product Image", "~ProductItem"),
        "product_title": PlatformLocator("~Product Title", "~Product Name"),
        "product_price": PlatformLocator("~Product Price", "~Product Price"),
        "sort_button": PlatformLocator(
            "~Shows current sorting order and displays available sorting options",
            "~sort button",
        ),
        "cart_badge": PlatformLocator(android_resource_id("cartTV"), "~cart badge"),
        "cart_icon": PlatformLocator("~View cart", "~Cart-tab-item"),
        "menu_icon": PlatformLocator("~View menu", "~More-tab-item"),
        "products_header": PlatformLocator(
            android_resource_id("productTV"),
            '**/XCUIElementTypeStaticText[`label == "Products"`]',
        ),
    }

    def wait_for_page_load(self) -> None:
        self.wait_for_visible(self.loc("products_screen"), 15)

    def is_page_displayed(self) -> bool:
        return self.element_exists(self.loc("products_screen"))

    def get_product_count(self) -> int:
        return self.mobile.count_visible(self.loc("store_item"))

    def tap_first_product(self) -> None:
        self.wait_for_visible(self.loc("store_item"), 10)
        self.tap(self.loc("store_item"))

    def tap_product_at_index(self, index: int) -> None:
        self.wait_for_visible(self.loc("store_item"), 10)
        self.tap(self.loc("store_item").nth(index))

    def tap_product_by_name(self, product_name: str) -> None:
        locator = self.get_locator(
            f'//android.widget.TextView[@text="{product_name}"]',
            f'**/XCUIElementTypeStaticText[`label == "{product_name}"`]',
        )
        self.wait_for_visible(locator, 10)
        self.tap(locator)

    def go_to_cart(self) -> None:
        self.tap(self.loc("cart_icon"))

    def get_cart_badge_count(self) -> int:
        if not self.element_exists(self.loc("cart_badge")):
            return 0
        return parse_count(self.get_text(self.loc("cart_badge")), 0)

    def cart_has_items(self) -> bool:
        return self.element_exists(self.loc("cart_badge"))

    def open_sort_menu(self) -> None:
        self.tap(self.loc("sort_button"))

    def sort_by(self, option: str) -> None:
        """Sort the catalog: name_asc, name_desc, price_asc or price_desc."""
        self.open_sort_menu()
        self.tap(SORT_OPTIONS[option].for_platform(self.mobile.platform))

    def sort_by_name_ascending(self) -> None:
        self.sort_by("name_asc")

    def sort_by_name_descending(self) -> None:
        self.sort_by("name_desc")

    def sort_by_price_ascending(self) -> None:
        self.sort_by("price_asc")

    def sort_by_price_descending(self) -> None:
        self.sort_by("price_desc")

    def open_menu(self) -> None:
        self.tap(self.loc("menu_icon"))

    def scroll_down_products(self) -> None:
        self.gestures.swipe_up(0.4)

    def get_product_titles(self) -> List[str]:
        title = self.loc("product_title")
        count = self.mobile.count_visible(title)
        return [self.get_text(title.nth(index)) for index in range(count)]

    def get_product_prices(self) -> List[str]:
        price = self.loc("product_price")
        count = self.mobile.count_visible(price)
        return [self.get_text(price.nth(index)) for index in range(count)]

from mobile_e2e.appium.locators import PlatformLocator
from .base_page import BasePage, android_resource_id, parse_count


class ProductDetailsPage(BasePage):
    """Detail screen of a single product."""

    LOCATORS = {
        "product_screen": PlatformLocator("~Displays selected product", "~Product Screen"),
        "product_image": PlatformLocator("~Product Image", "~Product Image"),
        "product_name": PlatformLocator(android_resource_id("productTV"), "~Product Title"),
        "product_price": PlatformLocator(android_resource_id("priceTV"), "~Product Price"),
        "product_description": PlatformLocator(android_resource_id("highlightsTV"), "~Product Description"),
        "add_to_cart_button": PlatformLocator("~Tap to add product to cart", "~Add To Cart button"),
        "counter_plus_button": PlatformLocator("~Increase item quantity", "~counter plus button"),
        "counter_minus_button": PlatformLocator("~Decrease item quantity", "~counter minus button"),
        "counter_amount": PlatformLocator(android_resource_id("noTV"), "~counter amount"),
        "color_circle": PlatformLocator("~Displays available colors of selected product", "~color circle"),
        "color_circle_selected": PlatformLocator("~Indicates when color is selected", "~circle selected"),
        "back_button": PlatformLocator("~View menu", "~Navigate back"),
        "cart_icon": PlatformLocator("~View cart", "~Cart-tab-item"),
        "cart_badge": PlatformLocator(android_resource_id("cartTV"), "~cart badge"),
        "star_rating": PlatformLocator("~star rating", "~star rating"),
        "highlights": PlatformLocator("~Highlights", "~Highlights"),
    }

    def wait_for_page_load(self) -> None:
        self.wait_for_visible(self.loc("product_screen"), 15)
        self.wait_for_visible(self.loc("add_to_cart_button"), 10)

    def is_page_displayed(self) -> bool:
        return self.element_exists(self.loc("product_screen"))

    def get_product_name(self) -> str:
        self.wait_for_visible(self.loc("product_name"), 5)
        return self.get_text(self.loc("product_name"))

    def get_product_price(self) -> str:
        self.wait_for_visible(self.loc("product_price"), 5)
        return self.get_text(self.loc("product_price"))

    def get_product_description(self) -> str:
        return self.get_text(self.loc("product_description"))

    def add_to_cart(self) -> None:
        self.wait_for_visible(self.loc("add_to_cart_button"), 5)
        self.tap(self.loc("add_to_cart_button"))

    def increase_quantity(self) -> None:
        self.tap(self.loc("counter_plus_button"))

    def decrease_quantity(self) -> None:
        self.tap(self.loc("counter_minus_button"))

    def get_quantity(self) -> int:
        return parse_count(self.get_text(self.loc("counter_amount")), 1)

    def set_quantity(self, quantity: int) -> None:
        current = self.get_quantity()
        for _ in range(quantity - current):
            self.increase_quantity()
        for _ in range(current - quantity):
            self.decrease_quantity()

    def add_to_cart_with_quantity(self, quantity: int) -> None:
        self.set_quantity(quantity)
        self.add_to_cart()

    def select_color(self, color_index: int) -> None:
        self.tap(self.loc("color_circle").nth(color_index))

    def has_color_options(self) -> bool:
        return self.element_exists(self.loc("color_circle"))

    def go_back(self) -> None:
        self.tap(self.loc("back_button"))

    def go_to_cart(self) -> None:
        self.tap(self.loc("cart_icon"))

    def get_cart_badge_count(self) -> int:
        if not self.element_exists(self.loc("cart_badge")):
            return 0
        return parse_count(self.get_text(self.loc("cart_badge")), 0)

    def scroll_down(self) -> None:
        self.gestures.swipe_up(0.3)

    def scroll_up(self) -> None:
        self.gestures.swipe_down(0.3)

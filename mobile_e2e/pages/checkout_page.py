import logging

from selenium.common.exceptions import WebDriverException

from mobile_e2e.appium.locators import PlatformLocator
from mobile_e2e.data import Address, PaymentCard
from .base_page import BasePage, android_resource_id

logger = logging.getLogger(__name__)

# Shipping form fields in the order they are filled, with the Address attribute they take
ADDRESS_FIELDS = (
    ("full_name_field", "full_name"),
    ("address_line1_field", "address_line1"),
    ("address_line2_field", "address_line2"),
    ("city_field", "city"),
    ("state_field", "state"),
    ("zip_code_field", "zip_code"),
    ("country_field", "country"),
)
OPTIONAL_ADDRESS_FIELDS = {"address_line2", "state"}


class CheckoutPage(BasePage):
    """Shipping address, payment, review and completion screens."""

    LOCATORS = {
        "checkout_address_screen": PlatformLocator(android_resource_id("fullNameET"), "~Checkout Address Screen"),
        "checkout_payment_screen": PlatformLocator(android_resource_id("paymentBtn"), "~Checkout Payment Screen"),
        "checkout_complete_screen": PlatformLocator(android_resource_id("completeTV"), "~Checkout Complete Screen"),
        "full_name_field": PlatformLocator(android_resource_id("fullNameET"), "~Full Name* input field"),
        "address_line1_field": PlatformLocator(android_resource_id("address1ET"), "~Address Line 1* input field"),
        "address_line2_field": PlatformLocator(android_resource_id("address2ET"), "~Address Line 2 input field"),
        "city_field": PlatformLocator(android_resource_id("cityET"), "~City* input field"),
        "state_field": PlatformLocator(android_resource_id("stateET"), "~State/Region input field"),
        "zip_code_field": PlatformLocator(android_resource_id("zipET"), "~Zip Code* input field"),
        "country_field": PlatformLocator(android_resource_id("countryET"), "~Country* input field"),
        "card_number_field": PlatformLocator(android_resource_id("cardNumberET"), "~Card Number* input field"),
        "expiration_date_field": PlatformLocator(
            android_resource_id("expirationDateET"), "~Expiration Date* input field"),
        "security_code_field": PlatformLocator(android_resource_id("securityCodeET"), "~Security Code* input field"),
        "card_holder_field": PlatformLocator(android_resource_id("nameET"), "~Full Name* input field"),
        "bill_address_checkbox": PlatformLocator(android_resource_id("billAddressChB"), "~checkbox"),
        "to_payment_button": PlatformLocator('android=new UiSelector().text("To Payment")', "~To Payment button"),
        "review_order_button": PlatformLocator(
            'android=new UiSelector().text("Review Order")', "~Review Order button"),
        "place_order_button": PlatformLocator('android=new UiSelector().text("Place Order")', "~Place Order button"),
        "continue_shopping_button": PlatformLocator(android_resource_id("shoopingBt"), "~Continue Shopping button"),
        "checkout_complete": PlatformLocator(
            'android=new UiSelector().text("Checkout Complete")', "~checkout complete icon"),
        "order_summary": PlatformLocator("~Checkout summary", "~checkout summary"),
    }

    def wait_for_page_load(self) -> None:
        self.wait_for_visible(self.loc("checkout_address_screen"), 15)

    def wait_for_payment_page(self) -> None:
        self.wait_for_visible(self.loc("checkout_payment_screen"), 15)

    def wait_for_complete_page(self) -> None:
        self.wait_for_visible(self.loc("checkout_complete_screen"), 30)

    def is_page_displayed(self) -> bool:
        return self.element_exists(self.loc("checkout_address_screen"))

    def is_payment_page_displayed(self) -> bool:
        return self.element_exists(self.loc("checkout_payment_screen"))

    def is_order_complete_displayed(self) -> bool:
        return self.element_exists(self.loc("checkout_complete_screen"))

    def _tap_and_fill(self, name: str, value: str) -> None:
        field = self.loc(name)
        self.tap(field)
        self.fill_field(field, value)

    def _hide_keyboard(self) -> None:
        try:
            self.mobile.hide_keyboard()
            self.pause(1)
        except WebDriverException:
            logger.debug("Keyboard hide not needed")

    def fill_shipping_address(self, address: Address) -> None:
        """Fill the shipping form. Empty optional fields are left untouched."""
        for field, attribute in ADDRESS_FIELDS:
            value = getattr(address, attribute)
            if not value and attribute in OPTIONAL_ADDRESS_FIELDS:
                continue
            self._tap_and_fill(field, value)

    def fill_payment_details(self, payment: PaymentCard) -> None:
        self.pause(2)
        self.wait_for_element(self.loc("card_number_field"), 10)
        self._tap_and_fill("card_number_field", payment.card_number)
        self._tap_and_fill("expiration_date_field", payment.expiration_date)
        self._tap_and_fill("security_code_field", payment.security_code)
        self._hide_keyboard()

        if payment.card_holder:
            if self.element_exists(self.loc("card_holder_field")):
                self._tap_and_fill("card_holder_field", payment.card_holder)
                self._hide_keyboard()
            else:
                logger.warning("Cardholder name field not visible on current screen, skipping")
        logger.info("Payment details filled")

    def proceed_to_payment(self) -> None:
        button = self.loc("to_payment_button")
        self._hide_keyboard()
        if not self.element_exists(button):
            logger.info("To Payment button not immediately visible, scrolling")
            self.gestures.swipe_up()
            self.pause(1)
        self.wait_for_visible(button, 10)
        self.tap(button)

    def review_order(self) -> None:
        button = self.loc("review_order_button")
        self._hide_keyboard()
        self.pause(2)
        if not self.element_exists(button):
            logger.info("Review Order button not immediately visible, scrolling")
            try:
                self.gestures.drag(500, 1500, 500, 500)
                self.pause(1)
            except WebDriverException as e:
                logger.warning(f"Scroll attempt failed, looking for the button anyway: {str(e)}")
        self.wait_for_visible(button, 10)
        self.tap(button)

    def place_order(self) -> None:
        self.tap(self.loc("place_order_button"))

    def continue_shopping(self) -> None:
        self.tap(self.loc("continue_shopping_button"))

    def is_order_successful(self) -> bool:
        return self.element_exists(self.loc("checkout_complete"))

    def scroll_down(self) -> None:
        try:
            self.gestures.swipe_up()
        except WebDriverException as e:
            logger.debug(f"Scroll not available: {str(e)}")

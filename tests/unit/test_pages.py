import pytest
from appium.webdriver.common.appiumby import AppiumBy

from mobile_e2e.appium.locators import LocatorStrategy
from mobile_e2e.data import ADDRESSES, PAYMENTS
from mobile_e2e.pages.base_page import BasePage, android_resource_id, parse_count
from mobile_e2e.pages.cart_page import CartPage
from mobile_e2e.pages.checkout_page import CheckoutPage
from mobile_e2e.pages.login_page import LoginPage
from mobile_e2e.pages.product_details_page import ProductDetailsPage
from mobile_e2e.pages.products_page import ProductsPage

ACC = AppiumBy.ACCESSIBILITY_ID
UIA = AppiumBy.ANDROID_UIAUTOMATOR
XPATH = AppiumBy.XPATH


def view(view_id):
    return f'new UiSelector().resourceId("com.saucelabs.mydemoapp.android:id/{view_id}")'


@pytest.fixture(autouse=True)
def no_pauses(mobile, monkeypatch):
    monkeypatch.setattr(mobile, "wait", lambda seconds: None)


@pytest.mark.parametrize("text, default, expected", [
    ("3", 0, 3),
    ("12 items", 0, 12),
    ("", 1, 1),
    (None, 0, 0),
    ("0", 1, 1),
    ("many", 1, 1),
])
def test_parse_count(text, default, expected):
    assert parse_count(text, default) == expected


def test_android_resource_id():
    assert android_resource_id("cartTV") == f"android={view('cartTV')}"


def test_base_page_is_abstract(mobile):
    with pytest.raises(TypeError):
        BasePage(mobile)


def test_locators_follow_platform(mobile, ios_mobile):
    assert LoginPage(mobile).loc("username_field").strategy == LocatorStrategy.ANDROID_UIAUTOMATOR
    assert LoginPage(ios_mobile).loc("username_field").strategy == LocatorStrategy.IOS_CLASS_CHAIN
    assert ProductsPage(ios_mobile).loc("menu_icon").value == "More-tab-item"


def test_login(mobile, fake_driver, make_element):
    username = fake_driver.add(UIA, view("nameET"), make_element(text="previous"))
    password = fake_driver.add(UIA, view("passwordET"), make_element())
    button = fake_driver.add(UIA, view("loginBtn"), make_element())

    LoginPage(mobile).login("bod@example.com", "10203040")

    assert username.text == "bod@example.com"
    assert password.text == "10203040"
    assert button.clicks == 1


def test_unknown_username_hint(mobile):
    with pytest.raises(ValueError):
        LoginPage(mobile).select_username_hint("mallory")


def test_logout_confirms_dialog(mobile, fake_driver, make_element):
    item = fake_driver.add(ACC, "Logout Menu Item", make_element())
    confirm = fake_driver.add(UIA, 'new UiSelector().text("LOGOUT")', make_element())
    LoginPage(mobile).logout()
    assert (item.clicks, confirm.clicks) == (1, 1)


def test_error_not_displayed(mobile, monkeypatch):
    page = LoginPage(mobile)
    monkeypatch.setattr(page, "wait_for_visible", lambda locator, timeout=10: [])
    assert page.is_error_displayed() is False


def test_products_count_and_badge(mobile, fake_driver, make_element):
    page = ProductsPage(mobile)
    fake_driver.add(ACC, "Product Image", make_element(), make_element(), make_element(displayed=False))
    assert page.get_product_count() == 2
    assert page.get_cart_badge_count() == 0
    assert page.cart_has_items() is False

    fake_driver.add(UIA, view("cartTV"), make_element(text="3"))
    assert page.get_cart_badge_count() == 3


def test_sort_by_price(mobile, fake_driver, make_element):
    sort = fake_driver.add(ACC, "Shows current sorting order and displays available sorting options", make_element())
    option = fake_driver.add(XPATH, '//android.widget.TextView[@text="Price - Ascending"]', make_element())
    ProductsPage(mobile).sort_by_price_ascending()
    assert (sort.clicks, option.clicks) == (1, 1)


def test_product_titles(mobile, fake_driver, make_element):
    fake_driver.add(ACC, "Product Title", make_element(text="Sauce Labs Backpack"), make_element(text="Sauce Labs Bike Light"))
    assert ProductsPage(mobile).get_product_titles() == ["Sauce Labs Backpack", "Sauce Labs Bike Light"]


def test_set_quantity(mobile, fake_driver, make_element):
    counter = fake_driver.add(UIA, view("noTV"), make_element(text="1"))
    plus = fake_driver.add(ACC, "Increase item quantity", make_element())
    minus = fake_driver.add(ACC, "Decrease item quantity", make_element())
    plus.on_click = lambda: setattr(counter, "text", str(int(counter.text) + 1))

    page = ProductDetailsPage(mobile)
    page.set_quantity(3)
    assert (plus.clicks, minus.clicks) == (2, 0)
    assert page.get_quantity() == 3


def test_cart_empty_state(mobile, fake_driver, make_element):
    page = CartPage(mobile)
    assert page.is_cart_empty() is False
    fake_driver.add(XPATH, '//android.widget.Button[@text="Go Shopping"]', make_element())
    assert page.is_cart_empty() is True


def test_clear_cart(mobile, fake_driver, make_element):
    rows = fake_driver.elements.setdefault((ACC, "Displays selected product"), [make_element(), make_element()])
    remove = fake_driver.add(ACC, "Removes product from cart", make_element())
    remove.on_click = rows.pop

    assert CartPage(mobile).clear_cart() == 2
    assert remove.clicks == 2


def test_cart_item_names(mobile, fake_driver, make_element):
    fake_driver.add(UIA, view("titleTV"), make_element(text="Sauce Labs Onesie"), make_element(text="Sauce Labs Backpack"))
    assert CartPage(mobile).get_all_item_names() == ["Sauce Labs Onesie", "Sauce Labs Backpack"]


def test_fill_shipping_address_skips_empty_optional_fields(mobile, fake_driver, make_element):
    fields = {view_id: fake_driver.add(UIA, view(view_id), make_element())
              for view_id in ("fullNameET", "address1ET", "address2ET", "cityET", "stateET", "zipET", "countryET")}

    CheckoutPage(mobile).fill_shipping_address(ADDRESSES["minimal"])

    assert fields["fullNameET"].text == "Jane Smith"
    assert fields["cityET"].text == "Düsseldorf"
    assert fields["countryET"].text == "Germany"
    assert fields["address2ET"].clicks == 0
    assert fields["stateET"].clicks == 0


def test_fill_payment_details_without_card_holder_field(mobile, fake_driver, make_element):
    fields = {view_id: fake_driver.add(UIA, view(view_id), make_element())
              for view_id in ("cardNumberET", "expirationDateET", "securityCodeET")}

    CheckoutPage(mobile).fill_payment_details(PAYMENTS["valid"])

    assert fields["cardNumberET"].text == "4111111111111111"
    assert fields["expirationDateET"].text == PAYMENTS["valid"].expiration_date
    assert fields["securityCodeET"].text == "123"


def test_proceed_to_payment_scrolls_when_hidden(mobile, fake_driver, make_element):
    button = fake_driver.add(UIA, 'new UiSelector().text("To Payment")', make_element(displayed=False))

    def reveal(*args):
        button.displayed = True

    fake_driver.swipe = reveal
    CheckoutPage(mobile).proceed_to_payment()
    assert button.clicks == 1


def test_open_login_from_menu(mobile, fake_driver, make_element):
    menu = fake_driver.add(ACC, "View menu", make_element())
    item = fake_driver.add(ACC, "Login Menu Item", make_element())
    LoginPage(mobile).open_from_menu()
    assert (menu.clicks, item.clicks) == (1, 1)


def test_login_error_messages(mobile, fake_driver, make_element):
    fake_driver.add(UIA, view("nameErrorTV"), make_element(text="Username is required"))
    fake_driver.add(
        UIA,
        view("passwordErrorTV") + '.className("android.widget.TextView")',
        make_element(text="Enter Password"),
    )
    page = LoginPage(mobile)

    assert page.get_error_message() == "Username is required"
    assert page.get_username_error_message() == "Username is required"
    assert page.get_password_error_message() == "Enter Password"
    assert page.is_password_error_displayed() is True


def test_clear_form_and_biometrics(mobile, fake_driver, make_element):
    username = fake_driver.add(UIA, view("nameET"), make_element(text="bod@example.com"))
    password = fake_driver.add(UIA, view("passwordET"), make_element(text="10203040"))
    biometrics = fake_driver.add(ACC, "Biometrics button", make_element())
    page = LoginPage(mobile)

    page.clear_form()
    page.tap_biometric_login()

    assert (username.text, password.text) == ("", "")
    assert biometrics.clicks == 1


def test_is_user_logged_in(mobile, fake_driver, make_element):
    page = LoginPage(mobile)
    assert page.is_user_logged_in() is False
    fake_driver.add(ACC, "Logout Menu Item", make_element())
    assert page.is_user_logged_in() is True


@pytest.mark.parametrize("method, label", [
    ("sort_by_name_ascending", "Name - Ascending"),
    ("sort_by_name_descending", "Name - Descending"),
    ("sort_by_price_descending", "Price - Descending"),
])
def test_sort_options(mobile, fake_driver, make_element, method, label):
    fake_driver.add(ACC, "Shows current sorting order and displays available sorting options", make_element())
    option = fake_driver.add(XPATH, f'//android.widget.TextView[@text="{label}"]', make_element())
    getattr(ProductsPage(mobile), method)()
    assert option.clicks == 1


def test_product_prices(mobile, fake_driver, make_element):
    fake_driver.add(ACC, "Product Price", make_element(text="$29.99"), make_element(text="$9.99"))
    assert ProductsPage(mobile).get_product_prices() == ["$29.99", "$9.99"]


def test_tap_product_by_index_and_name(mobile, fake_driver, make_element):
    items = fake_driver.add(ACC, "Product Image", make_element(), make_element(), make_element())
    title = fake_driver.add(XPATH, '//android.widget.TextView[@text="Sauce Labs Onesie"]', make_element())
    page = ProductsPage(mobile)

    page.tap_product_at_index(1)
    page.tap_product_by_name("Sauce Labs Onesie")

    assert [item.clicks for item in items] == [0, 1, 0]
    assert title.clicks == 1


def test_add_to_cart_with_quantity(mobile, fake_driver, make_element):
    counter = fake_driver.add(UIA, view("noTV"), make_element(text="1"))
    plus = fake_driver.add(ACC, "Increase item quantity", make_element())
    add = fake_driver.add(ACC, "Tap to add product to cart", make_element())
    plus.on_click = lambda: setattr(counter, "text", str(int(counter.text) + 1))

    ProductDetailsPage(mobile).add_to_cart_with_quantity(2)

    assert (plus.clicks, add.clicks) == (1, 1)


def test_product_description_and_colors(mobile, fake_driver, make_element):
    page = ProductDetailsPage(mobile)
    fake_driver.add(UIA, view("highlightsTV"), make_element(text="carry.allTheThings()"))
    assert page.has_color_options() is False

    colors = fake_driver.add(ACC, "Displays available colors of selected product", make_element(), make_element())
    page.select_color(1)

    assert page.get_product_description() == "carry.allTheThings()"
    assert page.has_color_options() is True
    assert [color.clicks for color in colors] == [0, 1]


def test_product_details_scroll_up(mobile, fake_driver):
    ProductDetailsPage(mobile).scroll_up()
    assert fake_driver.swipes == [(500, 600, 500, 1200, 800)]


def test_cart_totals(mobile, fake_driver, make_element):
    fake_driver.add(UIA, view("titleTV"), make_element(text="Sauce Labs Backpack"))
    fake_driver.add(UIA, view("totalPriceTV"), make_element(text="$29.99"))
    fake_driver.add(UIA, view("itemsTV"), make_element(text="1 item"))
    page = CartPage(mobile)

    assert page.get_first_item_name() == "Sauce Labs Backpack"
    assert page.get_total_price() == "$29.99"
    assert page.get_total_items_label() == "1 item"


def test_remove_item_at_index(mobile, fake_driver, make_element):
    buttons = fake_driver.add(ACC, "Removes product from cart", make_element(), make_element())
    CartPage(mobile).remove_item_at_index(1)
    assert [button.clicks for button in buttons] == [0, 1]


def test_order_successful(mobile, fake_driver, make_element):
    page = CheckoutPage(mobile)
    assert page.is_order_successful() is False
    fake_driver.add(UIA, 'new UiSelector().text("Checkout Complete")', make_element())
    assert page.is_order_successful() is True


def test_see_text(mobile, fake_driver):
    fake_driver.page_source = '<hierarchy><node text="Checkout Complete"/></hierarchy>'
    page = CartPage(mobile)

    page.see_text("Checkout Complete")
    page.dont_see_text("No Items")
    with pytest.raises(AssertionError, match='Text "No Items" is not visible on screen'):
        page.see_text("No Items")


def test_scroll_to_and_take_screenshot(mobile, fake_driver, make_element):
    fake_driver.add(ACC, "Confirms products for checkout", make_element())
    page = CartPage(mobile)

    page.scroll_to(page.loc("proceed_to_checkout"))
    path = page.take_screenshot("cart")

    assert fake_driver.swipes == []
    assert path.name == "cart.png"


def test_base_waits_and_attributes(mobile, fake_driver, make_element):
    fake_driver.add(ACC, "Confirms products for checkout", make_element(attributes={"enabled": "true"}))
    fake_driver.page_source = '<hierarchy><node text="My Cart"/></hierarchy>'
    page = CartPage(mobile)

    assert page.get_attribute(page.loc("proceed_to_checkout"), "enabled") == "true"
    assert page.wait_for_text("My Cart", timeout=1) is True
    assert page.wait_for_invisible("~Go Shopping button", timeout=1) is True

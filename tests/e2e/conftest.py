#!/usr/bin/env python3

import logging
import traceback

import pytest
from selenium.common.exceptions import WebDriverException

from mobile_e2e.appium.driver import MobileDriver
from mobile_e2e.appium.exceptions import AppiumServerError, MobileAutomationError
from mobile_e2e.appium.gestures import Gestures
from mobile_e2e.config import load_config
from mobile_e2e.environment import SessionEnvironment
from mobile_e2e.pages.cart_page import CartPage
from mobile_e2e.pages.checkout_page import CheckoutPage
from mobile_e2e.pages.login_page import LoginPage
from mobile_e2e.pages.product_details_page import ProductDetailsPage
from mobile_e2e.pages.products_page import ProductsPage
from mobile_e2e.reporting import allure_helper
from mobile_e2e.steps import Steps

logger = logging.getLogger(__name__)

APP_SETTLE_SECONDS = 2

environment_key = pytest.StashKey[SessionEnvironment]()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep the report of each phase on the item and capture the screen when a test fails."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

    if report.when != "call" or not report.failed:
        return
    mobile = item.funcargs.get("mobile")
    if mobile is None or not mobile.is_active or not mobile.config.run.screenshot_on_failure:
        return
    try:
        mobile.save_screenshot(f"{allure_helper.sanitize_file_name(item.name)}_failed.png")
    except (WebDriverException, MobileAutomationError, OSError) as e:
        logger.warning(f"Could not capture failure screenshot: {str(e)}")


def pytest_sessionfinish(session, exitstatus):
    """Stop Appium and publish the Allure report once every result has been written."""
    environment = session.config.stash.get(environment_key, None)
    if environment is not None:
        environment.teardown()


# Load test configuration
@pytest.fixture(scope="session")
def config():
    """Load test configuration"""
    return load_config()


@pytest.fixture(scope="session")
def environment(request, config):
    """Device, Appium and report directories for the whole run. Torn down in pytest_sessionfinish."""
    session = SessionEnvironment(config)
    request.config.stash[environment_key] = session
    try:
        session.bootstrap()
    except AppiumServerError as e:
        logger.error(f"Appium could not be started: {str(e)}")
        logger.debug(f"Stack trace: {traceback.format_exc()}")
        pytest.skip(f"Appium could not be started: {str(e)}")

    return session


@pytest.fixture
def mobile(request, config, environment):
    """A fresh Appium session per test, so every scenario starts from a relaunched app."""
    driver = MobileDriver(config)
    if not driver.start():
        pytest.skip("Failed to initialize mobile driver")

    driver.tracer.start_new_trace(request.node.name)
    allure_helper.add_epic("My Demo App")
    allure_helper.add_parameter("platform", config.platform_name)
    allure_helper.add_label("device", config.device.device_name)

    yield driver

    summary = driver.tracer.end_trace()
    if summary:
        allure_helper.attach_text(summary, "Test Steps")
    driver.quit()


@pytest.fixture(autouse=True)
def app_ready(request):
    """Give the relaunched app time to settle before each device-backed test."""
    if "mobile" in request.fixturenames:
        request.getfixturevalue("mobile").wait(APP_SETTLE_SECONDS)


@pytest.fixture
def gestures(mobile):
    return Gestures(mobile)


@pytest.fixture
def steps(mobile, gestures):
    return Steps(mobile, gestures)


@pytest.fixture
def login_page(mobile, gestures):
    return LoginPage(mobile, gestures)


@pytest.fixture
def products_page(mobile, gestures):
    return ProductsPage(mobile, gestures)


@pytest.fixture
def product_details_page(mobile, gestures):
    return ProductDetailsPage(mobile, gestures)


@pytest.fixture
def cart_page(mobile, gestures):
    return CartPage(mobile, gestures)


@pytest.fixture
def checkout_page(mobile, gestures):
    return CheckoutPage(mobile, gestures)

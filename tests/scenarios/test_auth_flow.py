"""The auth suite against the in-memory application."""

import pytest

from fakes import FakeApp, FakeSessionFactory
from uiflow.core.config.main import UiFlowConfig
from uiflow.core.fixtures import generate_credentials
from uiflow.core.steps import Fill
from uiflow.core.suite import CaseContext, CaseStatus, SuiteRunner
from uiflow.scenarios import auth, get_suite


@pytest.fixture
def fast_redirects(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(auth, "REDIRECT_TIMEOUT", 0.3)


def context(config: UiFlowConfig) -> CaseContext:
    return CaseContext(credentials=generate_credentials(), config=config)


async def test_auth_suite_passes(app: FakeApp, factory: FakeSessionFactory, config: UiFlowConfig) -> None:
    """Test the whole auth suite passes against a well-behaved application."""
    result = await SuiteRunner(config, factory).run(auth.auth_suite())

    failures = {case.name: str(case.error) for case in result.cases if not case.passed}
    assert failures == {}
    assert result.exit_code == 0
    assert len(result.cases) == 12
    assert all(session.dropped == [] for session in app.sessions)


async def test_account_chain_registers_one_user(app: FakeApp, factory: FakeSessionFactory, config: UiFlowConfig) -> None:
    """Test the account chain registers exactly one user."""
    result = await SuiteRunner(config, factory).run(auth.auth_suite().select("logout_after_login"))

    assert result.passed
    assert len(app.users) == 1
    assert next(iter(app.users)).startswith("e2e_")


async def test_closed_registration_blocks_the_chain(
    factory: FakeSessionFactory, app: FakeApp, config: UiFlowConfig, fast_redirects: None
) -> None:
    """Test a failed registration blocks the rest of the account chain."""
    app.accept_registrations = False

    result = await SuiteRunner(config, factory).run(auth.auth_suite().select(auth.ACCOUNT_CHAIN))

    by_name = {case.name: case for case in result.cases}
    assert by_name["register_new_user"].status is CaseStatus.FAILED
    assert by_name["register_new_user"].failed_step == "expect url /"
    for name in ("register_duplicate_username", "login_registered_user", "login_wrong_password", "logout_after_login"):
        assert by_name[name].status is CaseStatus.BLOCKED
        assert by_name[name].blocked_by == "register_new_user"
    assert result.exit_code == 1


async def test_login_without_account_fails_alone(
    factory: FakeSessionFactory, config: UiFlowConfig, fast_redirects: None
) -> None:
    """Test login fails when run without its registration."""
    suite = auth.auth_suite()
    case = next(case for case in suite if case.name == "login_registered_user")

    result = await SuiteRunner(config, factory).run_case(case, context(config))

    assert result.status is CaseStatus.FAILED
    assert result.failed_step == "expect url /"


def test_register_form_masks_passwords(config: UiFlowConfig) -> None:
    """Test password fills are masked in step descriptions."""
    steps = auth.register_form(context(config))
    descriptions = [step.describe() for step in steps]

    assert "testpassword123" not in " ".join(descriptions)
    assert sum(1 for step in steps if isinstance(step, Fill) and step.secret) == 2


def test_register_form_without_email_field(config: UiFlowConfig) -> None:
    """Test the email fill is skipped when no email selector is configured."""
    config.auth.email_selector = None
    steps = auth.register_form(context(config))

    assert [step.selector for step in steps if isinstance(step, Fill)] == ["#username", "#password", "#confirmPassword"]


def test_duplicate_registration_uses_a_fresh_email(config: UiFlowConfig) -> None:
    """Test the duplicate registration only reuses the username."""
    ctx = context(config)
    steps = auth.register_duplicate_username(ctx)
    email_fill = next(step for step in steps if isinstance(step, Fill) and step.selector == "#email")

    assert email_fill.value != ctx.credentials.email
    assert email_fill.value.endswith("@test.local")


def test_regions_follow_config(config: UiFlowConfig) -> None:
    """Test nav-scoped selectors follow the configured region."""
    config.auth.nav_selector = "header"
    steps = auth.navigate_to_login(context(config))

    assert "click header >> link:Login" in [step.describe() for step in steps]


def test_get_suite() -> None:
    """Test suites are looked up by name."""
    assert get_suite("auth").name == "auth"
    with pytest.raises(KeyError, match="available: auth"):
        get_suite("checkout")


def test_password_mismatch_pair(config: UiFlowConfig) -> None:
    """Test the mismatch case submits password123 against differentpassword."""
    steps = auth.register_password_mismatch(context(config))
    fills = [(step.selector, step.value) for step in steps if isinstance(step, Fill)]

    assert ("#password", "password123") in fills
    assert ("#confirmPassword", "differentpassword") in fills
    assert fills[-1] == ("#confirmPassword", "password123")


async def test_accepted_duplicate_username_fails_the_case(
    factory: FakeSessionFactory, app: FakeApp, config: UiFlowConfig, fast_redirects: None
) -> None:
    """Test an application that accepts a taken username fails the duplicate case."""
    app.accept_duplicates = True

    result = await SuiteRunner(config, factory).run(auth.auth_suite().select("register_duplicate_username"))

    by_name = {case.name: case for case in result.cases}
    assert by_name["register_new_user"].status is CaseStatus.PASSED
    assert by_name["register_duplicate_username"].status is CaseStatus.FAILED
    assert by_name["register_duplicate_username"].failed_step == "expect validation 'username already taken'"


async def test_accepted_wrong_password_fails_the_case(
    factory: FakeSessionFactory, app: FakeApp, config: UiFlowConfig, fast_redirects: None
) -> None:
    """Test an application that signs in with a wrong password fails the wrong-password case."""
    app.accept_any_password = True

    result = await SuiteRunner(config, factory).run(auth.auth_suite().select("login_wrong_password"))

    by_name = {case.name: case for case in result.cases}
    assert by_name["login_registered_user"].status is CaseStatus.PASSED
    assert by_name["login_wrong_password"].status is CaseStatus.FAILED
    assert by_name["login_wrong_password"].failed_step == "expect validation 'invalid username or password'"
    assert result.exit_code == 1


async def test_mismatch_that_creates_an_account_fails_the_case(
    factory: FakeSessionFactory, app: FakeApp, config: UiFlowConfig, fast_redirects: None
) -> None:
    """Test an application that registers on a password mismatch fails the mismatch case."""
    app.mismatch_creates_account = True
    case = next(case for case in auth.auth_suite() if case.name == "register_password_mismatch")

    result = await SuiteRunner(config, factory).run_case(case, context(config))

    assert result.status is CaseStatus.FAILED
    assert result.failed_step == "expect url /"
    assert len(app.users) == 1

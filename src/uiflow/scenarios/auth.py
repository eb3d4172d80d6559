"""Authentication flow: registration, login and logout through the rendered UI."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from uiflow.core.predicates import focused, hidden, text_hidden, text_visible, visible
from uiflow.core.steps import ClearCookies, Click, ExpectUrl, ExpectValidation, Fill, Navigate, Step, WaitFor
from uiflow.core.suite import CaseContext, FlowCase, Suite

if TYPE_CHECKING:
    from uiflow.core.config.main import AuthConfig

ACCOUNT_CHAIN = "account"
REDIRECT_TIMEOUT = 10.0
MISMATCH_PASSWORD = "password123"
MISMATCHED_PASSWORD = "differentpassword"
WRONG_PASSWORD = "wrongpassword"

PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
USERNAME_TAKEN = "username already taken"
INVALID_CREDENTIALS = "invalid username or password"


def _auth(ctx: CaseContext) -> AuthConfig:
    return ctx.config.auth


def _nav(ctx: CaseContext, selector: str) -> str:
    return f"{_auth(ctx).nav_selector} >> {selector}"


def _content(ctx: CaseContext, selector: str) -> str:
    return f"{_auth(ctx).content_selector} >> {selector}"


def greeting(ctx: CaseContext) -> str:
    return f"Hello, {ctx.credentials.username}"


def logged_out_checks(ctx: CaseContext) -> list[Step]:
    return [
        WaitFor(visible(_nav(ctx, "link:Login"))),
        WaitFor(visible(_nav(ctx, "link:Register"))),
    ]


def register_form(
    ctx: CaseContext,
    confirm_password: str | None = None,
    email: str | None = None,
) -> list[Step]:
    credentials = ctx.credentials
    steps: list[Step] = [Navigate("/register"), Fill("#username", credentials.username)]
    if email_selector := _auth(ctx).email_selector:
        steps.append(Fill(email_selector, email or credentials.email))
    steps += [
        Fill("#password", credentials.password, secret=True),
        Fill("#confirmPassword", confirm_password or credentials.password, secret=True),
        Click("button:Register"),
    ]
    return steps


def login_form(ctx: CaseContext, password: str | None = None) -> list[Step]:
    return [
        Navigate("/login"),
        Fill("#username", ctx.credentials.username),
        Fill("#password", password or ctx.credentials.password, secret=True),
        Click("button:Sign in"),
    ]


def signed_in_checks(ctx: CaseContext) -> list[Step]:
    return [
        ExpectUrl("/", REDIRECT_TIMEOUT),
        WaitFor(text_visible(greeting(ctx)), REDIRECT_TIMEOUT),
    ]


# ---- independent cases ------------------------------------------------------------


def home_shows_auth_links_when_logged_out(ctx: CaseContext) -> list[Step]:
    return [ClearCookies(), Navigate("/"), *logged_out_checks(ctx)]


def navigate_to_register(ctx: CaseContext) -> list[Step]:
    return [
        Navigate("/"),
        Click(_nav(ctx, "link:Register")),
        ExpectUrl("/register"),
        WaitFor(visible("heading:Create your account")),
    ]


def navigate_to_login(ctx: CaseContext) -> list[Step]:
    return [
        Navigate("/"),
        Click(_nav(ctx, "link:Login")),
        ExpectUrl("/login"),
        WaitFor(visible("heading:Sign in to your account")),
    ]


def register_empty_fields_keeps_focus(ctx: CaseContext) -> list[Step]:
    return [
        Navigate("/register"),
        Click("button:Register"),
        WaitFor(focused("#username")),
        ExpectUrl("/register"),
    ]


def register_password_mismatch(ctx: CaseContext) -> list[Step]:
    ctx = replace(ctx, credentials=replace(ctx.credentials, password=MISMATCH_PASSWORD))
    return [
        *register_form(ctx, confirm_password=MISMATCHED_PASSWORD),
        ExpectValidation(PASSWORDS_DO_NOT_MATCH),
        ExpectUrl("/register"),
        # the rejected attempt must not have created the account
        Fill("#confirmPassword", ctx.credentials.password, secret=True),
        Click("button:Register"),
        *signed_in_checks(ctx),
    ]


def login_page_links_to_register(ctx: CaseContext) -> list[Step]:
    return [
        Navigate("/login"),
        WaitFor(text_visible("Don't have an account?")),
        Click(_content(ctx, "link:Register")),
        ExpectUrl("/register"),
    ]


def register_page_links_to_login(ctx: CaseContext) -> list[Step]:
    return [
        Navigate("/register"),
        WaitFor(text_visible("Already have an account?")),
        Click(_content(ctx, "link:Sign in")),
        ExpectUrl("/login"),
    ]


# ---- account chain ----------------------------------------------------------------


def register_new_user(ctx: CaseContext) -> list[Step]:
    return [*register_form(ctx), *signed_in_checks(ctx)]


def register_duplicate_username(ctx: CaseContext) -> list[Step]:
    # a different email so only the username can collide
    local, _, domain = ctx.credentials.email.partition("@")
    return [
        *register_form(ctx, email=f"{local}2@{domain}"),
        ExpectValidation(USERNAME_TAKEN, REDIRECT_TIMEOUT),
        ExpectUrl("/register"),
    ]


def login_registered_user(ctx: CaseContext) -> list[Step]:
    return [*login_form(ctx), *signed_in_checks(ctx)]


def login_wrong_password(ctx: CaseContext) -> list[Step]:
    return [
        *login_form(ctx, password=WRONG_PASSWORD),
        ExpectValidation(INVALID_CREDENTIALS, REDIRECT_TIMEOUT),
        WaitFor(text_hidden(greeting(ctx))),
        WaitFor(hidden("button:Logout")),
        ExpectUrl("/login"),
    ]


def logout_after_login(ctx: CaseContext) -> list[Step]:
    return [
        *login_form(ctx),
        *signed_in_checks(ctx),
        Click(_nav(ctx, "button:Logout")),
        *logged_out_checks(ctx),
        WaitFor(text_hidden(greeting(ctx))),
        Navigate("/"),
        *logged_out_checks(ctx),
    ]


def auth_suite() -> Suite:
    return Suite(
        "auth",
        [
            FlowCase(
                "home_shows_auth_links_when_logged_out",
                home_shows_auth_links_when_logged_out,
                description="Logged-out home page offers Login and Register",
            ),
            FlowCase("navigate_to_register", navigate_to_register, description="Nav link opens the register page"),
            FlowCase("navigate_to_login", navigate_to_login, description="Nav link opens the login page"),
            FlowCase(
                "register_empty_fields_keeps_focus",
                register_empty_fields_keeps_focus,
                description="Empty submit stays on /register with username focused",
            ),
            FlowCase(
                "register_password_mismatch",
                register_password_mismatch,
                description="Mismatched passwords are rejected, then a corrected submit succeeds",
            ),
            FlowCase(
                "login_page_links_to_register",
                login_page_links_to_register,
                description="Login page links to registration",
            ),
            FlowCase(
                "register_page_links_to_login",
                register_page_links_to_login,
                description="Register page links to sign in",
            ),
            FlowCase(
                "register_new_user",
                register_new_user,
                chain=ACCOUNT_CHAIN,
                description="A new username registers and is greeted",
            ),
            FlowCase(
                "register_duplicate_username",
                register_duplicate_username,
                chain=ACCOUNT_CHAIN,
                description="Registering the same username again is refused",
            ),
            FlowCase(
                "login_registered_user",
                login_registered_user,
                chain=ACCOUNT_CHAIN,
                description="The registered user can sign in",
            ),
            FlowCase(
                "login_wrong_password",
                login_wrong_password,
                chain=ACCOUNT_CHAIN,
                description="A wrong password is refused and no session is established",
            ),
            FlowCase(
                "logout_after_login",
                logout_after_login,
                chain=ACCOUNT_CHAIN,
                description="Logout restores the logged-out navigation",
            ),
        ],
    )

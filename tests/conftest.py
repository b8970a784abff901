import pytest

from modules.accounts.dtos import Principal, RoleEnum
from modules.accounts.identity import DjangoIdentityProvider
from modules.accounts.repositories import PrivilegedProfileLookup, ProfileDjangoRepository
from modules.accounts.services import AccountService, PrincipalResolver
from modules.history.repositories import HistoryDjangoRepository
from modules.history.services import HistoryService
from modules.notifications.repositories import NotificationDjangoRepository
from modules.notifications.services import NotificationService
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def identity_provider():
    return DjangoIdentityProvider()


@pytest.fixture()
def profile_lookup():
    return PrivilegedProfileLookup()


@pytest.fixture()
def account_service(identity_provider, profile_lookup):
    return AccountService(
        identity_provider=identity_provider,
        profile_repository=ProfileDjangoRepository(),
        profile_lookup=profile_lookup,
    )


@pytest.fixture()
def resolver(identity_provider, profile_lookup):
    return PrincipalResolver(identity_provider=identity_provider, profile_lookup=profile_lookup)


@pytest.fixture()
def order_repository():
    return OrderDjangoRepository()


@pytest.fixture()
def notification_service(profile_lookup, order_repository):
    return NotificationService(
        notification_repository=NotificationDjangoRepository(),
        profile_lookup=profile_lookup,
        order_repository=order_repository,
    )


@pytest.fixture()
def history_service(order_repository):
    return HistoryService(
        history_repository=HistoryDjangoRepository(),
        order_repository=order_repository,
    )


@pytest.fixture()
def order_service(order_repository, notification_service, history_service):
    return OrderService(
        order_repository=order_repository,
        notification_service=notification_service,
        history_service=history_service,
    )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_account(account_service):
    """Register an account and return its ``Principal``."""

    def _make(username: str, role: RoleEnum = RoleEnum.VIEWER, password: str = "secret123"):
        payload = {
            "email": f"{username}@dccakes.example.com",
            "password": password,
            "username": username,
        }
        if role == RoleEnum.ADMIN:
            result = account_service.register_admin(payload)
        else:
            result = account_service.register_viewer(payload)
        return Principal(identity_id=result.user.id, role=result.user.role)

    return _make


@pytest.fixture()
def admin(make_account):
    return make_account("alice", RoleEnum.ADMIN)


@pytest.fixture()
def second_admin(make_account):
    return make_account("bob", RoleEnum.ADMIN)


@pytest.fixture()
def viewer(make_account):
    return make_account("victor")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order(order_service, admin):
    return order_service.create_order(
        admin, {"customer_name": "Jane", "order_details": "2kg vanilla"}
    )

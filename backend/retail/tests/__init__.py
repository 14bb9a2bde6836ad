from decimal import Decimal

from django.contrib.auth.models import User

from ..models import Account, AccountMembership, Item


def create_user_with_account(username: str, password: str = "pw", **flags):
    user = User.objects.create_user(username=username, password=password)
    account = Account.objects.create(name=f"{username}-account", owner=user, **flags)
    AccountMembership.objects.create(account=account, user=user, is_owner=True)
    return user, account


def create_item(account, name="Widget", quantity="10", selling_price="10.00", **fields):
    return Item.objects.create(
        account=account,
        name=name,
        quantity=Decimal(quantity),
        selling_price=Decimal(selling_price),
        **fields,
    )

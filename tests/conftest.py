import pytest
from decimal import Decimal

from authentication.models import User
from orders.models import Order
from wallet.models import CommissionRate


@pytest.fixture
def master_admin(db):
    return User.objects.create_user(
        email='master@example.com', password='secret', first_name='Mary', last_name='Master',
        role=User.ROLE_MASTER_ADMIN,
    )


@pytest.fixture
def super_admin(db):
    return User.objects.create_user(
        email='super@example.com', password='secret', first_name='Sam', last_name='Super',
        role=User.ROLE_SUPER_ADMIN,
    )


@pytest.fixture
def admin(super_admin):
    return User.objects.create_user(
        email='admin@example.com', password='secret', first_name='Ada', last_name='Admin',
        role=User.ROLE_ADMIN, super_admin=super_admin,
    )


@pytest.fixture
def marketer(admin):
    return User.objects.create_user(
        email='marketer@example.com', password='secret', first_name='Mo', last_name='Marketer',
        role=User.ROLE_MARKETER, admin=admin,
    )


@pytest.fixture
def android_rate(db):
    return CommissionRate.objects.create(
        device_type='Android',
        marketer_rate=Decimal('10000.00'),
        admin_rate=Decimal('2000.00'),
        superadmin_rate=Decimal('1500.00'),
    )


@pytest.fixture
def order_factory(marketer):
    def make_order(device_type='android', quantity=2, sold_amount=Decimal('250000.00'), **kwargs):
        return Order.objects.create(
            marketer=kwargs.pop('owner', marketer),
            device_type=device_type,
            device_name=kwargs.pop('device_name', 'Tecno Spark 10'),
            quantity=quantity,
            sold_amount=sold_amount,
            **kwargs,
        )
    return make_order

from django.core.management.base import BaseCommand, CommandError

from retail.models import Account, Customer, Supplier
from retail.services import expected_balance
from retail.services.transactions import adjust_balance


class Command(BaseCommand):
    help = 'Compare customer and supplier balances with their transaction history.'

    def add_arguments(self, parser):
        parser.add_argument('--account', type=int, help='Only reconcile this account id.')
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Reset drifted balances to the expected value through an audited override.',
        )

    def handle(self, *args, **options):
        accounts = Account.objects.filter(is_active=True)
        if options['account'] is not None:
            accounts = accounts.filter(pk=options['account'])
            if not accounts.exists():
                raise CommandError(f"Account {options['account']} does not exist.")

        drifted = 0
        for account in accounts:
            for kind, model in (('customer', Customer), ('supplier', Supplier)):
                for entity in model.objects.filter(account=account).order_by('pk'):
                    expected = expected_balance(entity)
                    if expected == entity.balance:
                        continue
                    drifted += 1
                    self.stdout.write(
                        self.style.WARNING(
                            f'{kind.capitalize()} {entity.id} ({entity.name}) balance {entity.balance}, expected {expected}'
                        )
                    )
                    if options['fix']:
                        if expected < 0:
                            # Overrides cannot set a negative balance.
                            self.stdout.write(
                                self.style.WARNING(
                                    f'{kind.capitalize()} {entity.id} expects a credit of {-expected}; not fixed, adjust it manually.'
                                )
                            )
                            continue
                        adjust_balance(
                            account.pk,
                            kind=kind,
                            entity_id=entity.pk,
                            balance=expected,
                            reason='Reconciliation',
                        )
                        self.stdout.write(
                            self.style.SUCCESS(f'{kind.capitalize()} {entity.id} balance updated to {expected}')
                        )

        if not drifted:
            self.stdout.write(self.style.SUCCESS('All balances reconcile.'))

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

PAYMENT_METHOD_CHOICES = [
    ('credit_card', 'Credit card'),
    ('debit_card', 'Debit card'),
    ('pix', 'Pix'),
    ('cash', 'Cash'),
    ('account', 'Open account'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('appointments', '0001_initial'),
        ('clients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Payable',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.CharField(max_length=255, verbose_name='Description')),
                ('category', models.CharField(default='General', max_length=60, verbose_name='Category')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Amount')),
                ('due_date', models.DateField(verbose_name='Due date')),
                (
                    'status',
                    models.CharField(
                        choices=[('pending', 'Pending'), ('paid', 'Paid')],
                        default='pending',
                        max_length=16,
                        verbose_name='Status',
                    ),
                ),
                ('paid_at', models.DateTimeField(blank=True, null=True, verbose_name='Paid at')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'financial_payables',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Receivable',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('client_name', models.CharField(blank=True, max_length=120, verbose_name='Client')),
                ('service_name', models.CharField(blank=True, max_length=120, verbose_name='Service')),
                ('description', models.CharField(blank=True, max_length=255, verbose_name='Description')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Amount')),
                ('service_date', models.DateField(blank=True, null=True, verbose_name='Service date')),
                ('due_date', models.DateField(verbose_name='Due date')),
                (
                    'status',
                    models.CharField(
                        choices=[('pending', 'Pending'), ('paid', 'Paid')],
                        default='pending',
                        max_length=16,
                        verbose_name='Status',
                    ),
                ),
                (
                    'payment_method',
                    models.CharField(
                        blank=True, choices=PAYMENT_METHOD_CHOICES, max_length=16, verbose_name='Payment method'
                    ),
                ),
                ('paid_at', models.DateTimeField(blank=True, null=True, verbose_name='Paid at')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                (
                    'appointment',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='receivables',
                        to='appointments.appointment',
                    ),
                ),
                (
                    'client',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='receivables',
                        to='clients.client',
                    ),
                ),
            ],
            options={
                'db_table': 'financial_receivables',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'due_date'], name='receivable_status_due_idx'),
                    models.Index(fields=['appointment'], name='receivable_appointment_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CashSession',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('opening_amount', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Opening amount')),
                (
                    'closing_amount',
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True, verbose_name='Closing amount'
                    ),
                ),
                ('opened_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Opened at')),
                ('closed_at', models.DateTimeField(blank=True, null=True, verbose_name='Closed at')),
                (
                    'status',
                    models.CharField(
                        choices=[('open', 'Open'), ('closed', 'Closed')],
                        default='open',
                        max_length=8,
                        verbose_name='Status',
                    ),
                ),
                (
                    'closed_by',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='cash_sessions_closed',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    'opened_by',
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='cash_sessions_opened',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                'db_table': 'cash_sessions',
                'ordering': ['-opened_at'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('status', 'open')),
                        fields=('status',),
                        name='single_open_cash_session',
                    )
                ],
            },
        ),
    ]

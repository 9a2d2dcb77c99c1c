import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('clients', '0001_initial'),
        ('staff', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('start_time', models.DateTimeField(verbose_name='Start')),
                ('end_time', models.DateTimeField(verbose_name='End')),
                ('rescheduled_from', models.DateTimeField(blank=True, null=True, verbose_name='Previous start')),
                (
                    'status',
                    models.CharField(
                        choices=[
                            ('scheduled', 'Scheduled'),
                            ('confirmed', 'Confirmed'),
                            ('rescheduled', 'Rescheduled'),
                            ('cancelled', 'Cancelled'),
                            ('completed', 'Completed'),
                            ('no_show', 'No show'),
                        ],
                        default='confirmed',
                        max_length=16,
                        verbose_name='Status',
                    ),
                ),
                ('attendance_confirmed', models.BooleanField(default=False, verbose_name='Attendance confirmed')),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=8, verbose_name='Price')),
                (
                    'payment_status',
                    models.CharField(
                        choices=[('unpaid', 'Unpaid'), ('paid', 'Paid'), ('open_account', 'Open account')],
                        default='unpaid',
                        max_length=16,
                        verbose_name='Payment status',
                    ),
                ),
                (
                    'payment_method',
                    models.CharField(
                        blank=True,
                        choices=[
                            ('credit_card', 'Credit card'),
                            ('debit_card', 'Debit card'),
                            ('pix', 'Pix'),
                            ('cash', 'Cash'),
                            ('account', 'Open account'),
                        ],
                        max_length=16,
                        verbose_name='Payment method',
                    ),
                ),
                ('paid_at', models.DateTimeField(blank=True, null=True, verbose_name='Paid at')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                (
                    'client',
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='appointments',
                        to='clients.client',
                    ),
                ),
                (
                    'professional',
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='appointments',
                        to='staff.professional',
                    ),
                ),
                (
                    'service',
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='appointments',
                        to='catalog.service',
                    ),
                ),
            ],
            options={
                'ordering': ['-start_time'],
                'indexes': [
                    models.Index(fields=['start_time'], name='appointment_start_idx'),
                    models.Index(fields=['status', 'start_time'], name='appointment_status_start_idx'),
                    models.Index(fields=['professional', 'start_time'], name='appointment_prof_start_idx'),
                ],
            },
        ),
    ]

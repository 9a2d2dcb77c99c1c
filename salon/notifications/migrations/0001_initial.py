import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('appointments', '0001_initial'),
        ('clients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='MessageHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                (
                    'type',
                    models.CharField(
                        choices=[
                            ('appointment_confirmation', 'Appointment confirmation'),
                            ('appointment_reminder_24h', '24h reminder'),
                            ('birthday', 'Birthday'),
                            ('overdue_invoice', 'Overdue invoice'),
                            ('reschedule_confirmation', 'Reschedule confirmation'),
                            ('general', 'General'),
                        ],
                        max_length=32,
                        verbose_name='Type',
                    ),
                ),
                (
                    'channel',
                    models.CharField(
                        choices=[('whatsapp', 'WhatsApp')], default='whatsapp', max_length=16, verbose_name='Channel'
                    ),
                ),
                ('content', models.TextField(verbose_name='Content')),
                (
                    'status',
                    models.CharField(
                        choices=[('sent', 'Sent'), ('failed', 'Failed'), ('skipped', 'Skipped')],
                        max_length=16,
                        verbose_name='Status',
                    ),
                ),
                ('sent_at', models.DateTimeField(auto_now_add=True, verbose_name='Sent at')),
                ('provider', models.CharField(blank=True, max_length=32, verbose_name='Provider')),
                (
                    'external_id',
                    models.CharField(
                        blank=True, help_text='Twilio Message SID or mock id', max_length=100, verbose_name='External ID'
                    ),
                ),
                ('error_message', models.TextField(blank=True, verbose_name='Error Message')),
                (
                    'appointment',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='messages',
                        to='appointments.appointment',
                    ),
                ),
                (
                    'client',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='messages',
                        to='clients.client',
                    ),
                ),
            ],
            options={
                'verbose_name': 'Message',
                'verbose_name_plural': 'Message history',
                'db_table': 'message_history',
                'ordering': ['-sent_at'],
                'indexes': [
                    models.Index(fields=['client', '-sent_at'], name='message_client_sent_idx'),
                    models.Index(fields=['status', '-sent_at'], name='message_status_sent_idx'),
                    models.Index(fields=['type', '-sent_at'], name='message_type_sent_idx'),
                ],
            },
        ),
    ]

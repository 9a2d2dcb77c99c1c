"""
Tests for clients and their delinquency summary
"""
import json
from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from salon.finance.models import Receivable
from .models import Client


class ClientQuerySetTest(TestCase):
    """Test birthday and delinquency lookups"""

    def test_birthdays_on_ignores_year(self):
        Client.objects.create(name='Ana', birth_date=date(1985, 12, 1))
        Client.objects.create(name='Bia', birth_date=date(2001, 12, 2))
        Client.objects.create(name='Cris')

        names = list(Client.objects.birthdays_on(date(2026, 12, 1)).values_list('name', flat=True))
        self.assertEqual(names, ['Ana'])

    def test_with_delinquency(self):
        as_of = date(2026, 5, 1)
        maria = Client.objects.create(name='Maria')
        Client.objects.create(name='Paula')
        for days, status in ((10, 'pending'), (25, 'pending'), (40, 'paid'), (-3, 'pending')):
            Receivable.objects.create(
                client=maria, amount=Decimal('50.00'), due_date=as_of - timedelta(days=days), status=status
            )

        clients = {c.name: c for c in Client.objects.with_delinquency(as_of)}

        self.assertEqual(clients['Maria'].overdue_count, 2)
        self.assertEqual(clients['Maria'].oldest_due_date, as_of - timedelta(days=25))
        self.assertEqual(clients['Paula'].overdue_count, 0)
        self.assertIsNone(clients['Paula'].oldest_due_date)


class ClientViewsTest(TestCase):
    """Test the JSON endpoints"""

    def setUp(self):
        self.user = get_user_model().objects.create_user(username='reception', password='secret')
        self.client.force_login(self.user)

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_create_defaults_to_accepting_messages(self):
        response = self.post_json(reverse('clients:create'), {'name': '  Maria  ', 'phone': '11987654321'})
        self.assertEqual(response.status_code, 201)
        body = response.json()['client']
        self.assertEqual(body['name'], 'Maria')
        self.assertTrue(body['accepts_messages'])

    def test_create_requires_name(self):
        response = self.post_json(reverse('clients:create'), {'phone': '11987654321'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('name', response.json()['errors'])

    def test_partial_update_keeps_other_fields(self):
        client = Client.objects.create(name='Maria', phone='11987654321', birth_date=date(1990, 1, 2))
        response = self.post_json(reverse('clients:edit', args=[client.id]), {'accepts_messages': False})
        self.assertEqual(response.status_code, 200)

        client.refresh_from_db()
        self.assertFalse(client.accepts_messages)
        self.assertEqual(client.phone, '11987654321')
        self.assertEqual(client.birth_date, date(1990, 1, 2))

    def test_list_shows_delinquency(self):
        today = timezone.localdate()
        maria = Client.objects.create(name='Maria', phone='11987654321')
        Receivable.objects.create(client=maria, amount=Decimal('50.00'), due_date=today - timedelta(days=22))
        Client.objects.create(name='Paula', phone='11911112222')

        clients = {c['name']: c for c in self.client.get(reverse('clients:list')).json()['clients']}

        self.assertEqual(clients['Maria']['overdue_days'], 22)
        self.assertEqual(clients['Maria']['delinquency'], 'warning')
        self.assertEqual(clients['Paula']['delinquency'], 'ok')

    def test_search(self):
        Client.objects.create(name='Maria', phone='11987654321')
        Client.objects.create(name='Paula', phone='11911112222')
        response = self.client.get(reverse('clients:list'), {'search': '1111'})
        self.assertEqual([c['name'] for c in response.json()['clients']], ['Paula'])

    def test_detail_and_delete(self):
        client = Client.objects.create(name='Maria')
        response = self.client.get(reverse('clients:detail', args=[client.id]))
        self.assertEqual(response.json()['client']['total_appointments'], 0)

        response = self.client.post(reverse('clients:delete', args=[client.id]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Client.objects.exists())

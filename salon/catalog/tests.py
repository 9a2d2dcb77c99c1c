"""
Tests for the service catalog endpoints
"""
import json
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from .models import Service, ServiceCategory


class ServiceViewsTest(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username='owner', password='secret')
        self.client.force_login(self.user)
        self.hair = ServiceCategory.objects.create(name='Hair')

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_list_groups_by_category(self):
        Service.objects.create(name='Haircut', price=Decimal('80.00'), category=self.hair)
        Service.objects.create(name='Waxing', price=Decimal('60.00'))

        categories = self.client.get(reverse('catalog:service-list')).json()['categories']

        self.assertEqual([s['name'] for s in categories['Hair']], ['Haircut'])
        self.assertEqual([s['name'] for s in categories['Other']], ['Waxing'])

    def test_create_and_edit(self):
        response = self.post_json(
            reverse('catalog:service-create'),
            {'name': 'Coloring', 'price': '150.00', 'duration_minutes': 90, 'category': self.hair.id},
        )
        self.assertEqual(response.status_code, 201)
        service = response.json()['service']
        self.assertTrue(service['is_active'])

        response = self.post_json(reverse('catalog:service-edit', args=[service['id']]), {'price': '170.00'})
        self.assertEqual(response.json()['service']['price'], '170.00')
        self.assertEqual(response.json()['service']['category'], 'Hair')

    def test_zero_duration_is_rejected(self):
        response = self.post_json(
            reverse('catalog:service-create'), {'name': 'Nothing', 'price': '10', 'duration_minutes': 0}
        )
        self.assertEqual(response.status_code, 400)

    def test_detail(self):
        service = Service.objects.create(name='Haircut', price=Decimal('80.00'), duration_minutes=45)
        body = self.client.get(reverse('catalog:service-detail', args=[service.id])).json()['service']
        self.assertEqual(body['duration_minutes'], 45)

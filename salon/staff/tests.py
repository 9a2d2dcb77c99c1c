"""
Tests for professionals and commissions
"""
import json
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from .models import Professional


class ProfessionalModelTest(TestCase):
    def test_commission_for(self):
        professional = Professional(name='Ana', commission_percent=Decimal('37.5'))
        self.assertEqual(professional.commission_for(Decimal('80.00')), Decimal('30.00'))
        self.assertEqual(professional.commission_for(0), Decimal('0.00'))

    def test_specialty_list(self):
        professional = Professional(name='Ana', specialties='Haircut, , Coloring ')
        self.assertEqual(professional.specialty_list, ['Haircut', 'Coloring'])


class ProfessionalViewsTest(TestCase):
    """Test the roster endpoints"""

    def setUp(self):
        self.admin = get_user_model().objects.create_user(username='owner', password='secret', is_staff=True)
        self.client.force_login(self.admin)

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_create_with_specialty_list(self):
        response = self.post_json(
            reverse('staff:professional-create'),
            {'name': 'Ana', 'specialties': ['Haircut', 'Coloring'], 'commission_percent': '40'},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['professional']['specialties'], ['Haircut', 'Coloring'])
        self.assertTrue(Professional.objects.get().is_active)

    def test_commission_over_100_is_rejected(self):
        response = self.post_json(reverse('staff:professional-create'), {'name': 'Ana', 'commission_percent': '120'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('commission_percent', response.json()['errors'])

    def test_non_staff_cannot_save(self):
        user = get_user_model().objects.create_user(username='reception', password='secret')
        self.client.force_login(user)
        response = self.post_json(reverse('staff:professional-create'), {'name': 'Ana'})
        self.assertEqual(response.status_code, 403)

    def test_edit_keeps_other_fields(self):
        professional = Professional.objects.create(name='Ana', specialties='Nails', commission_percent=30)
        response = self.post_json(reverse('staff:professional-edit', args=[professional.id]), {'phone': '11999990000'})
        self.assertEqual(response.status_code, 200)
        professional.refresh_from_db()
        self.assertEqual(professional.specialties, 'Nails')
        self.assertEqual(professional.commission_percent, Decimal('30.00'))

    def test_list(self):
        Professional.objects.create(name='Ana')
        professionals = self.client.get(reverse('staff:professional-list')).json()['professionals']
        self.assertEqual(professionals[0]['appointment_count'], 0)
        self.assertEqual(professionals[0]['total_revenue'], '0.00')

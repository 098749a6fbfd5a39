"""Payload builders shared by the records tests."""


def make_payload(**overrides) -> dict:
    payload = {
        'employeeId': 'emp001',
        'name': 'Alice Perera',
        'dateOfBirth': '1990-05-15',
        'bloodGroup': 'o+',
        'allergies': ['Penicillin', '  Peanuts '],
        'medications': [{'name': 'Metformin', 'dosage': '500mg', 'frequency': 'twice daily'}],
        'emergencyContacts': [{'name': 'Ravi Perera', 'phone': '+94-77-1234567', 'relationship': 'Spouse'}],
        'physician': {'name': 'Dr. Grace Hopper', 'phone': '+1-555-0199', 'specialty': 'Cardiology'},
        'insurance': {'provider': 'Acme Health', 'memberId': 'AH-100200', 'groupNumber': 'G-42'},
        'medicalConditions': ['Type 2 diabetes'],
        'notes': 'Carries an insulin pen.',
    }
    payload.update(overrides)
    return payload

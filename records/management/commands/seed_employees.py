"""Insert sample employee records for local development."""
from django.core.management.base import BaseCommand

from records.exceptions import ConflictError
from records.models import BLOOD_GROUPS
from records.services.store import RecordStore

FIRST_NAMES = ["Alice", "Bilal", "Chen", "Dana", "Emeka", "Farah", "Goran", "Hana", "Ivan", "Julia"]
LAST_NAMES = ["Perera", "Khan", "Wei", "Levi", "Okafor", "Haddad", "Novak", "Sato", "Petrov", "Silva"]


def sample_payload(i: int) -> dict:
    first = FIRST_NAMES[i % len(FIRST_NAMES)]
    last = LAST_NAMES[(i * 3) % len(LAST_NAMES)]
    return {
        "employeeId": f"emp{i + 1:03d}",
        "name": f"{first} {last}",
        "dateOfBirth": f"{1970 + i % 30}-{(i % 12) + 1:02d}-{(i % 27) + 1:02d}",
        "bloodGroup": BLOOD_GROUPS[i % len(BLOOD_GROUPS)],
        "allergies": ["Penicillin"] if i % 3 == 0 else [],
        "medications": [{"name": "Metformin", "dosage": "500mg", "frequency": "twice daily"}] if i % 4 == 0 else [],
        "emergencyContacts": [
            {"name": f"{FIRST_NAMES[(i + 1) % len(FIRST_NAMES)]} {last}", "phone": f"+1-555-01{i % 100:02d}",
             "relationship": "Spouse"},
        ],
        "physician": {"name": "Dr. Grace Hopper", "phone": "+1-555-0199", "specialty": "General Practice"},
        "insurance": {"provider": "Acme Health", "memberId": f"AH{100000 + i}", "groupNumber": "G-42"},
        "medicalConditions": ["Type 2 diabetes"] if i % 4 == 0 else [],
        "notes": "",
    }


class Command(BaseCommand):
    help = "Seed sample employee records through the record store (existing employee IDs are skipped)."

    def add_arguments(self, parser):
        parser.add_argument("--count", type=int, default=10)

    def handle(self, *args, **opts):
        store = RecordStore()
        store.open()
        created = skipped = 0
        for i in range(opts["count"]):
            try:
                record = store.create(sample_payload(i))
            except ConflictError:
                skipped += 1
                continue
            created += 1
            self.stdout.write(f"{record.employee_id} -> {record.lookup_url}")
        self.stdout.write(self.style.SUCCESS(f"Seeded {created} employees ({skipped} already present)."))

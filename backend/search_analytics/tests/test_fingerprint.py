from datetime import timedelta

from search_analytics.fingerprint import EMPTY_FINGERPRINT, compute_fingerprint, djb2_xor
from search_analytics.tests.factories import job_record, local_dt


class TestFingerprint:
    def setup_method(self):
        created = local_dt(2024, 5, 1)
        self.records = [
            job_record(id=1, status='Applied', created_at=created, status_changed_at=created + timedelta(days=2)),
            job_record(id=2, status='Offer', created_at=created, status_changed_at=created + timedelta(days=20)),
            job_record(id=3, status='Interested', created_at=created),
        ]

    def test_empty_input_uses_sentinel(self):
        assert compute_fingerprint([]) == EMPTY_FINGERPRINT == 'no-jobs'

    def test_format_is_versioned_hex(self):
        fp = compute_fingerprint(self.records)
        assert fp.startswith('v1_')
        assert len(fp) == len('v1_') + 8
        int(fp[3:], 16)

    def test_order_does_not_matter(self):
        assert compute_fingerprint(self.records) == compute_fingerprint(list(reversed(self.records)))
        shuffled = [self.records[1], self.records[2], self.records[0]]
        assert compute_fingerprint(shuffled) == compute_fingerprint(self.records)

    def test_status_change_changes_fingerprint(self):
        changed = list(self.records)
        r = changed[0]
        changed[0] = job_record(id=r.id, status='Interview', created_at=r.created_at, status_changed_at=r.status_changed_at)
        assert compute_fingerprint(changed) != compute_fingerprint(self.records)

    def test_timestamp_change_changes_fingerprint(self):
        changed = list(self.records)
        r = changed[2]
        changed[2] = job_record(id=r.id, status=r.status, created_at=r.created_at + timedelta(seconds=1))
        assert compute_fingerprint(changed) != compute_fingerprint(self.records)

    def test_ignores_fields_outside_the_key(self):
        renamed = [job_record(id=r.id, status=r.status, created_at=r.created_at,
                              status_changed_at=r.status_changed_at, title='Renamed') for r in self.records]
        assert compute_fingerprint(renamed) == compute_fingerprint(self.records)

    def test_djb2_xor_known_values(self):
        assert djb2_xor('') == 5381
        assert djb2_xor('a') == (5381 * 33) ^ ord('a')

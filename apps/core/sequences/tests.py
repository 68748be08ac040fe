import threading
from datetime import date
from unittest import mock

from django.db import OperationalError, connection, transaction
from django.test import TestCase, TransactionTestCase, override_settings

from .identifiers import (
    avatar_url_for,
    batch_year_short,
    build_identifier,
    generate_password,
    get_branch_code,
    get_department_code,
    get_program_code,
    initials_for,
    section_for_sequence,
    staff_id_prefix,
    student_id_prefix,
)
from .models import Counter
from .services import ensure_counter_at_least, next_sequence, peek_sequence


class NextSequenceTests(TestCase):
    def test_missing_counter_starts_at_one(self):
        self.assertEqual(peek_sequence('staff_TCH24CS'), 0)
        self.assertEqual(next_sequence('staff_TCH24CS'), 1)
        self.assertEqual(Counter.objects.get(key='staff_TCH24CS').current, 1)

    def test_repeated_calls_return_distinct_consecutive_values(self):
        Counter.objects.create(key='student_BT24CS', current=41)

        issued = [next_sequence('student_BT24CS') for _ in range(25)]

        self.assertEqual(len(set(issued)), 25)
        self.assertEqual(issued, list(range(42, 67)))
        self.assertEqual(peek_sequence('student_BT24CS'), 66)

    def test_keys_are_independent(self):
        next_sequence('staff_ADM24AD')
        next_sequence('staff_ADM24AD')

        self.assertEqual(next_sequence('staff_TCH24AD'), 1)
        self.assertEqual(next_sequence('staff_ADM24AD'), 3)

    def test_lock_contention_inside_a_transaction_propagates(self):
        with mock.patch.object(Counter, 'save', side_effect=OperationalError('database is locked')):
            with self.assertRaises(OperationalError):
                with transaction.atomic():
                    next_sequence('staff_TCH24ME')

    def test_ensure_counter_at_least_never_lowers(self):
        Counter.objects.create(key='student_BT24EC', current=12)

        self.assertEqual(ensure_counter_at_least('student_BT24EC', 5), 12)
        self.assertEqual(ensure_counter_at_least('student_BT24EC', 40), 40)
        self.assertEqual(next_sequence('student_BT24EC'), 41)


class ConcurrentSequenceTests(TransactionTestCase):
    WORKERS = 8
    CALLS_PER_WORKER = 5

    def test_lock_contention_is_retried_outside_a_transaction(self):
        Counter.objects.create(key='staff_TCH24ME', current=0)
        real_save = Counter.save
        calls = []

        def flaky_save(counter, *args, **kwargs):
            calls.append(counter.key)
            if len(calls) == 1:
                raise OperationalError('database is locked')
            return real_save(counter, *args, **kwargs)

        with mock.patch.object(Counter, 'save', flaky_save), mock.patch('apps.core.sequences.services.time.sleep'):
            self.assertEqual(next_sequence('staff_TCH24ME'), 1)

        self.assertEqual(len(calls), 2)
        self.assertEqual(peek_sequence('staff_TCH24ME'), 1)

    def _run_workers(self, target):
        barrier = threading.Barrier(self.WORKERS)
        results = []
        errors = []
        lock = threading.Lock()

        def worker():
            try:
                barrier.wait()
                values = target()
                with lock:
                    results.extend(values)
            except Exception as exc:
                with lock:
                    errors.append(repr(exc))
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(self.WORKERS)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return results, errors

    def test_concurrent_callers_receive_distinct_values_without_gaps(self):
        results, errors = self._run_workers(
            lambda: [next_sequence('staff_TCH24CS') for _ in range(self.CALLS_PER_WORKER)]
        )

        total = self.WORKERS * self.CALLS_PER_WORKER
        self.assertEqual(errors, [])
        self.assertEqual(sorted(results), list(range(1, total + 1)))
        self.assertEqual(Counter.objects.get(key='staff_TCH24CS').current, total)

    def test_concurrent_first_use_creates_a_single_counter(self):
        results, errors = self._run_workers(lambda: [next_sequence('student_BT25CS')])

        self.assertEqual(errors, [])
        self.assertEqual(sorted(results), list(range(1, self.WORKERS + 1)))
        self.assertEqual(Counter.objects.filter(key='student_BT25CS').count(), 1)


class IdentifierTests(TestCase):
    def test_build_identifier_is_deterministic(self):
        first = build_identifier('TCH', 'EC', '23', 12)
        second = build_identifier('TCH', 'EC', '23', 12)
        self.assertEqual(first, 'TCH23EC0012')
        self.assertEqual(first, second)

    def test_program_codes_and_fallbacks(self):
        self.assertEqual(get_program_code('B.Tech'), 'BT')
        self.assertEqual(get_program_code('B.Com'), 'BCOM')
        self.assertEqual(get_program_code('Pharmacy'), 'PH')
        self.assertEqual(get_program_code(''), 'XXX')

    def test_branch_codes_are_scoped_to_program(self):
        self.assertEqual(get_branch_code('B.Tech', 'CSE'), 'CS')
        self.assertEqual(get_branch_code('Law', 'Criminal Law'), 'CRML')
        self.assertEqual(get_branch_code('B.Sc', 'Computer Science'), 'CS')
        self.assertEqual(get_branch_code('B.Tech', 'Robotics'), 'RO')
        self.assertEqual(get_branch_code('B.Tech', 'Q'), 'QX')
        self.assertEqual(get_branch_code('B.Tech', ''), 'XX')

    def test_department_codes_use_table_then_keywords(self):
        self.assertEqual(get_department_code('CSE Dept'), 'CS')
        self.assertEqual(get_department_code('Library'), 'LB')
        self.assertEqual(get_department_code('School of Electronics'), 'EC')
        self.assertEqual(get_department_code('Faculty of Law'), 'LW')
        self.assertEqual(get_department_code('Sports'), 'SP')
        self.assertEqual(get_department_code(None), 'XX')

    def test_prefixes(self):
        self.assertEqual(staff_id_prefix('admin', 'General Administration', date(2024, 6, 1)), 'ADM24AD')
        self.assertEqual(staff_id_prefix('teacher', 'ECE Dept', '2023-01-15'), 'TCH23EC')
        self.assertEqual(student_id_prefix('B.Tech', 'CSE', '2024-2028'), 'BT24CS')
        self.assertEqual(student_id_prefix('MBA', 'Finance', 'unknown'), 'MBAXXFN')
        self.assertEqual(batch_year_short('2021-25'), '21')

    def test_section_letters_fill_thirty_at_a_time(self):
        self.assertEqual(section_for_sequence(1), 'A')
        self.assertEqual(section_for_sequence(30), 'A')
        self.assertEqual(section_for_sequence(31), 'B')
        self.assertEqual(section_for_sequence(61, section_size=30), 'C')

    def test_section_letters_continue_past_z(self):
        self.assertEqual(section_for_sequence(780), 'Z')
        self.assertEqual(section_for_sequence(781), 'AA')
        self.assertEqual(section_for_sequence(811), 'AB')
        self.assertEqual(section_for_sequence(1561), 'BA')
        self.assertEqual(section_for_sequence(9999), 'LV')

    def test_generate_password(self):
        self.assertEqual(generate_password('Ananya Rao', '2004-03-09'), 'ANA0903')
        self.assertEqual(generate_password('Li', date(2003, 12, 1)), 'LI0112')
        self.assertIsNone(generate_password('Ananya', 'not-a-date'))
        self.assertIsNone(generate_password('', '2004-03-09'))

    @override_settings(AVATAR_PLACEHOLDER_URL='https://img.example/{initials}.png')
    def test_initials_and_avatar(self):
        self.assertEqual(initials_for('ananya lakshmi rao'), 'AL')
        self.assertEqual(initials_for(''), '??')
        self.assertEqual(avatar_url_for('Ravi Kumar'), 'https://img.example/RK.png')

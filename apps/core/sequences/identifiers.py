"""Human-readable identifiers for students and staff.

Student: ``{ProgramCode}{YY}{BranchCode}{0001}``, e.g. ``BT24CS0007``.
Staff:   ``{ADM|TCH}{YY}{DeptCode}{0001}``,      e.g. ``TCH23EC0012``.

Everything here is pure; sequence numbers come from ``services.next_sequence``.
"""
import re
from datetime import date, datetime

from django.conf import settings

PROGRAM_CODES = {
    'B.Tech': 'BT',
    'MBA': 'MBA',
    'Law': 'LW',
    'MBBS': 'MB',
    'B.Sc': 'BS',
    'B.Com': 'BCOM',
}

BRANCH_CODES = {
    'B.Tech': {
        'CSE': 'CS',
        'ECE': 'EC',
        'MECH': 'ME',
        'IT': 'IT',
        'AI&ML': 'AI',
        'DS': 'DS',
        'CIVIL': 'CE',
        'Other': 'OT',
    },
    'MBA': {
        'Marketing': 'MK',
        'Finance': 'FN',
        'HR': 'HR',
        'Operations': 'OP',
        'General': 'GN',
    },
    'Law': {
        'Corporate Law': 'CL',
        'Criminal Law': 'CRML',
        'Civil Law': 'CVL',
        'General': 'GN',
    },
    'MBBS': {
        'General Medicine': 'GM',
    },
    'B.Sc': {
        'Physics': 'PH',
        'Chemistry': 'CH',
        'Mathematics': 'MA',
        'Computer Science': 'CS',
        'Biotechnology': 'BT',
    },
    'B.Com': {
        'General': 'GN',
        'Accounting & Finance': 'AF',
        'Taxation': 'TX',
        'Corporate Secretaryship': 'CS',
    },
}

DEPARTMENT_CODES = {
    'CSE Dept': 'CS',
    'ECE Dept': 'EC',
    'Mechanical Dept': 'ME',
    'IT Dept': 'IT',
    'AI&ML Dept': 'AI',
    'Data Science Dept': 'DS',
    'Civil Dept': 'CE',
    'General Administration': 'AD',
    'Accounts': 'AC',
    'Administration': 'AD',
    'Library': 'LB',
    'IT Support': 'IT',
    'Physics Dept': 'PH',
    'Chemistry Dept': 'CH',
    'Mathematics Dept': 'MA',
}

# Checked in order; first keyword contained in the upper-cased department wins.
DEPARTMENT_KEYWORDS = (
    (('CSE', 'COMPUTER SCIENCE'), 'CS'),
    (('ECE', 'ELECTRONICS'), 'EC'),
    (('MECH',), 'ME'),
    (('IT',), 'IT'),
    (('ADMINISTRATION',), 'AD'),
    (('ACCOUNTS',), 'AC'),
    (('LAW',), 'LW'),
    (('MEDICINE', 'MBBS'), 'MD'),
    (('MBA',), 'BA'),
)

ROLE_PREFIXES = {
    'admin': 'ADM',
    'teacher': 'TCH',
}

ADMIN_DEPARTMENT = 'General Administration'

_BATCH_YEAR = re.compile(r'^(\d{4})')


def _letters(value):
    return re.sub(r'[^A-Za-z]', '', value or '')


def _lookup(table, value):
    if value in table:
        return table[value]
    lowered = (value or '').strip().lower()
    for key, code in table.items():
        if key.lower() == lowered:
            return code
    return None


def get_program_code(program):
    if not program:
        return 'XXX'
    code = _lookup(PROGRAM_CODES, program)
    if code:
        return code
    return _letters(program)[:2].upper() or 'XXX'


def get_branch_code(program, branch):
    if not program or not branch:
        return 'XX'
    code = _lookup(BRANCH_CODES.get(program, {}), branch)
    if code:
        return code
    letters = _letters(branch).upper()
    if len(letters) >= 2:
        return letters[:2]
    if letters:
        return f"{letters}X"
    return 'XX'


def get_department_code(department):
    if not department:
        return 'XX'
    code = _lookup(DEPARTMENT_CODES, department)
    if code:
        return code

    upper = department.upper()
    for keywords, keyword_code in DEPARTMENT_KEYWORDS:
        if any(keyword in upper for keyword in keywords):
            return keyword_code
    return _letters(department)[:2].upper() or 'XX'


def year_short(value=None):
    """Two-digit year of a date, an ISO date string, or today when missing."""
    if isinstance(value, str) and value:
        try:
            value = datetime.strptime(value[:10], '%Y-%m-%d').date()
        except ValueError:
            value = None
    if not isinstance(value, (date, datetime)):
        value = date.today()
    return f"{value.year % 100:02d}"


def batch_year_short(batch):
    match = _BATCH_YEAR.match((batch or '').strip())
    if not match:
        return 'XX'
    return match.group(1)[-2:]


def build_identifier(code, unit_code, yy, sequence):
    return f"{code}{yy}{unit_code}{int(sequence):04d}"


def staff_id_prefix(role, department, date_of_joining=None):
    role_code = ROLE_PREFIXES.get(role, 'TCH')
    return f"{role_code}{year_short(date_of_joining)}{get_department_code(department)}"


def student_id_prefix(program, branch, batch):
    return f"{get_program_code(program)}{batch_year_short(batch)}{get_branch_code(program, branch)}"


def staff_counter_key(prefix):
    return f"staff_{prefix}"


def student_counter_key(prefix):
    return f"student_{prefix}"


def section_for_sequence(sequence, section_size=None):
    """Section letter for a serial: A..Z, then AA, AB and so on past the 26th section."""
    section_size = section_size or settings.SECTION_SIZE
    index = (int(sequence) - 1) // section_size
    letters = ''
    while True:
        index, remainder = divmod(index, 26)
        letters = chr(65 + remainder) + letters
        if index == 0:
            return letters
        index -= 1


def generate_password(name, dob):
    """Initial password: first three letters of the first name, upper-cased, then DDMM of birth."""
    first_name = (name or '').strip().split(' ')[0]
    if not first_name:
        return None

    if isinstance(dob, str):
        try:
            dob = datetime.strptime(dob.strip()[:10], '%Y-%m-%d').date()
        except ValueError:
            return None
    if not isinstance(dob, (date, datetime)):
        return None

    return f"{first_name[:3].upper()}{dob.day:02d}{dob.month:02d}"


def initials_for(name):
    parts = [part for part in (name or '').split() if part]
    initials = ''.join(part[0] for part in parts)[:2].upper()
    return initials or '??'


def avatar_url_for(name):
    return settings.AVATAR_PLACEHOLDER_URL.format(initials=initials_for(name))

from django.db import models

from apps.core.students.models import Student


def default_amenities():
    return ['Wi-Fi', 'Common Room', 'Laundry Service']


def default_rules():
    return ['No outside guests after 10 PM', 'Maintain silence during study hours']


class Hostel(models.Model):
    TYPE_BOYS = 'Boys'
    TYPE_GIRLS = 'Girls'
    TYPE_COED = 'Co-ed'
    TYPE_CHOICES = (
        (TYPE_BOYS, 'Boys'),
        (TYPE_GIRLS, 'Girls'),
        (TYPE_COED, 'Co-ed'),
    )

    STATUS_OPERATIONAL = 'Operational'
    STATUS_MAINTENANCE = 'Under Maintenance'
    STATUS_CLOSED = 'Closed'
    STATUS_CHOICES = (
        (STATUS_OPERATIONAL, 'Operational'),
        (STATUS_MAINTENANCE, 'Under Maintenance'),
        (STATUS_CLOSED, 'Closed'),
    )

    name = models.CharField(max_length=120, unique=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_BOYS)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_OPERATIONAL)

    warden_name = models.CharField(max_length=120, blank=True)
    warden_contact = models.CharField(max_length=20, blank=True)
    warden_email = models.EmailField(blank=True)
    warden_office_location = models.CharField(max_length=120, blank=True)

    amenities = models.JSONField(default=default_amenities, blank=True)
    rules_highlight = models.JSONField(default=default_rules, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Room(models.Model):
    hostel = models.ForeignKey(Hostel, on_delete=models.CASCADE, related_name='rooms')
    room_number = models.CharField(max_length=20)
    capacity = models.PositiveSmallIntegerField(default=2)
    room_type = models.CharField(max_length=30, blank=True)
    floor = models.SmallIntegerField(null=True, blank=True)

    class Meta:
        ordering = ['hostel', 'room_number']
        constraints = [
            models.UniqueConstraint(fields=['hostel', 'room_number'], name='unique_room_number_per_hostel'),
        ]

    def __str__(self):
        return f"{self.hostel.name} - {self.room_number}"


class RoomResident(models.Model):
    """A student's bed in a room. The one-to-one keeps a student in one room college-wide."""

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='residents')
    student = models.OneToOneField(Student, on_delete=models.CASCADE, related_name='residency')
    student_name = models.CharField(max_length=150)
    allocated_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['room', 'allocated_at']

    def __str__(self):
        return f"{self.student_name} in {self.room}"


class Complaint(models.Model):
    STATUS_PENDING = 'Pending'
    STATUS_IN_PROGRESS = 'In Progress'
    STATUS_RESOLVED = 'Resolved'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_RESOLVED, 'Resolved'),
    )

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='hostel_complaints')
    hostel = models.ForeignKey(
        Hostel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='complaints',
    )
    student_name = models.CharField(max_length=150)
    college_id = models.CharField(max_length=32, blank=True)
    room_number = models.CharField(max_length=20, blank=True)
    issue = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    date = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-id']

    def __str__(self):
        return f"{self.student_name}: {self.status}"

from django.db import models


class CohortQuerySet(models.QuerySet):
    """Filters shared by every model denormalizing a program/branch/year cohort."""

    def for_cohort(self, program=None, branch=None, year=None, section=None):
        filters = {}
        if program:
            filters['program'] = program
        if branch:
            filters['branch'] = branch
        if year:
            filters['year'] = year
        if section:
            filters['section'] = section
        return self.filter(**filters)


class CohortManager(models.Manager):
    def get_queryset(self):
        return CohortQuerySet(self.model, using=self._db)

    def for_cohort(self, **kwargs):
        return self.get_queryset().for_cohort(**kwargs)

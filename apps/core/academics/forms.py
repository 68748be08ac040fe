from django import forms

from .models import Course, Material


class CourseForm(forms.Form):
    course_id = forms.CharField(max_length=20)
    name = forms.CharField(max_length=150)
    program = forms.CharField(max_length=80)
    branch = forms.CharField(max_length=80)
    semester = forms.IntegerField(min_value=1, max_value=12)
    credits = forms.IntegerField(min_value=0, max_value=10, required=False)
    description = forms.CharField(required=False)

    def clean_credits(self):
        credits = self.cleaned_data.get('credits')
        return 3 if credits is None else credits


class CourseFilterForm(forms.Form):
    program = forms.CharField(required=False)
    branch = forms.CharField(required=False)
    year = forms.IntegerField(min_value=1, required=False)
    semester = forms.IntegerField(min_value=1, required=False)


class ClassForm(forms.Form):
    program = forms.CharField(max_length=80)
    branch = forms.CharField(max_length=80)
    section = forms.CharField(max_length=4)
    year = forms.IntegerField(min_value=1, max_value=6)
    semester = forms.IntegerField(min_value=1, max_value=12)
    course = forms.ModelChoiceField(queryset=Course.objects.all(), to_field_name='course_id')
    teacher_uid = forms.CharField(max_length=28)


class TeacherAssignmentForm(forms.Form):
    teacher_uid = forms.CharField(max_length=28)


class RosterChangeForm(forms.Form):
    student_id = forms.CharField(max_length=32)


class MaterialForm(forms.Form):
    course = forms.ModelChoiceField(queryset=Course.objects.all(), to_field_name='course_id')
    class_id = forms.IntegerField(required=False)
    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    url = forms.URLField(max_length=500)
    material_type = forms.ChoiceField(choices=Material.TYPE_CHOICES, required=False)


class SectionScheduleForm(forms.Form):
    program = forms.CharField(max_length=80)
    branch = forms.CharField(max_length=80)
    semester = forms.IntegerField(min_value=1, max_value=12)
    section = forms.CharField(max_length=4)

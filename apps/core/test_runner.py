from django.apps import apps
from django.test.runner import DiscoverRunner


class CollegeAppsDiscoverRunner(DiscoverRunner):
    """Run the suites of the installed college apps when no labels are given."""

    def build_suite(self, test_labels=None, **kwargs):
        if not test_labels:
            test_labels = [
                app_config.name
                for app_config in apps.get_app_configs()
                if app_config.name.startswith('apps.core.')
            ]
        return super().build_suite(test_labels, **kwargs)

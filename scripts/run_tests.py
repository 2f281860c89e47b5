#!/usr/bin/env python
"""
Test runner script for the whole project
Usage: python scripts/run_tests.py
"""
import os
import sys

import django
from django.conf import settings
from django.test.utils import get_runner

if __name__ == "__main__":
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'dukabook.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests([
        'dukabook.core',
        'dukabook.catalog',
        'dukabook.inventory',
        'dukabook.sales',
        'dukabook.parties',
        'dukabook.expenses',
        'dukabook.reports',
    ])
    sys.exit(bool(failures))

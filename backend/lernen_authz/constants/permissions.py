"""Central catalog data for Lernen roles and permissions.
Extend cautiously; never rename permission names silently. Add the new name and
retire the old one through a migration instead.
"""
from __future__ import annotations
from typing import List, Dict

WILDCARD = '*'

ROLE_NAMES = ['admin', 'tutor', 'student', 'sub_admin']

PERMISSIONS = [
    'can-manage-courses',
    'can-manage-badges',
    'can-manage-course-bundles',
    'can-manage-subscriptions',
    'can-manage-forums',
    'can-manage-insights',
    'can-manage-menu',
    'can-manage-option-builder',
    'can-manage-pages',
    'can-manage-email-settings',
    'can-manage-notification-settings',
    'can-manage-languages',
    'can-manage-subjects',
    'can-manage-subject-groups',
    'can-manage-language-translations',
    'can-manage-addons',
    'can-manage-upgrade',
    'can-manage-users',
    'can-manage-identity-verification',
    'can-manage-reviews',
    'can-manage-invoices',
    'can-manage-bookings',
    'can-manage-withdraw-requests',
    'can-manage-commission-settings',
    'can-manage-payment-methods',
    'can-manage-create-blogs',
    'can-manage-all-blogs',
    'can-manage-update-blogs',
    'can-manage-blog-categories',
    'can-manage-dispute',
    'can-manage-disputes-list',
    'can-manage-admin-users',
]

TUTOR_PERMISSIONS = [
    'can-manage-subjects',
    'can-manage-subject-groups',
    'can-manage-bookings',
    'can-manage-withdraw-requests',
    'can-manage-commission-settings',
    'can-manage-payment-methods',
    'can-manage-create-blogs',
    'can-manage-all-blogs',
    'can-manage-update-blogs',
    'can-manage-blog-categories',
    'can-manage-reviews',
    'can-manage-invoices',
    'can-manage-dispute',
]

STUDENT_PERMISSIONS = [
    'can-manage-bookings',
    'can-manage-reviews',
    'can-manage-invoices',
    'can-manage-dispute',
]

# Role -> explicit permission names; '*' expands to the whole catalog
ROLE_PRESETS: Dict[str, List[str]] = {
    'admin': [WILDCARD],
    'sub_admin': [WILDCARD],
    'tutor': TUTOR_PERMISSIONS,
    'student': STUDENT_PERMISSIONS,
}

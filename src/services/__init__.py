"""
Service functions for the signatures queue.

This package contains reusable functions for identifiers, validation links,
mail text and delivery, admin alerts and the variable store.
"""

__all__ = ['admin_alert', 'identifiers', 'mail', 'mail_text', 'validation_link', 'variables']

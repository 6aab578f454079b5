"""Domain layer for finwise application.

Services are imported from their modules (``finwise.domain.transaction_import``
and friends); this package only groups them. The utils and database layers
import ``finwise.domain.errors`` and ``finwise.domain.entities``, so nothing is
re-exported here.
"""

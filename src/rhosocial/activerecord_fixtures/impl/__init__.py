# src/rhosocial/activerecord_fixtures/impl/__init__.py
"""Storage backends the fixture loader ships in addition to the ActiveRecord ones."""

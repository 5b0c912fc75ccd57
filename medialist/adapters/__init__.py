"""Adaptateurs : implementations concretes des ports (fichiers, services, CLI)."""

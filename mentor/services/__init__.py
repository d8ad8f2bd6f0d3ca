"""Mentor services."""
from mentor.services.mentor_service import MentorService, TurnPreparation

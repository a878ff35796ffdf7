"""
FSM states for text prompts.
"""
from aiogram.fsm.state import State, StatesGroup


class RegistrationStates(StatesGroup):
    """Employee ID prompt on first sign-in."""
    
    employee_id = State()


class ProfileStates(StatesGroup):
    """Profile edits."""
    
    phone = State()


class AppointmentStates(StatesGroup):
    """Admin appointment editor."""
    
    date = State()
    time = State()
    address = State()
    notes = State()


class SupportStates(StatesGroup):
    """Support ticket to HR."""
    
    message = State()

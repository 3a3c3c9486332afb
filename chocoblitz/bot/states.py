from aiogram.fsm.state import State, StatesGroup


class LoginForm(StatesGroup):
    waiting_email = State()
    waiting_password = State()
    waiting_remember = State()


class SignupForm(StatesGroup):
    waiting_name = State()
    waiting_email = State()
    waiting_password = State()
    waiting_confirm = State()
    waiting_terms = State()


class ClearCart(StatesGroup):
    waiting_confirm = State()

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup

YES = "✅ Yes"
NO = "❌ No"


def main_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text="/catalog"), KeyboardButton(text="/cart")],
            [KeyboardButton(text="/checkout"), KeyboardButton(text="/clear")],
            [KeyboardButton(text="/help"), KeyboardButton(text="/logout")],
        ],
        resize_keyboard=True,
    )


def guest_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text="/login"), KeyboardButton(text="/signup")]],
        resize_keyboard=True,
    )


def yes_no_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=YES), KeyboardButton(text=NO)], [KeyboardButton(text="/cancel")]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )

from html import escape
from typing import Optional

from aiogram import Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, ReplyKeyboardRemove

from chocoblitz.bot.keyboards import YES, guest_kb, main_kb, yes_no_kb
from chocoblitz.bot.states import ClearCart, LoginForm, SignupForm
from chocoblitz.config import settings
from chocoblitz.constants import CATEGORIES, FILTER_ALL
from chocoblitz.services.auth_api import AuthError
from chocoblitz.storefront import CheckoutError, Storefront
from chocoblitz.utils.formatters import money
from chocoblitz.utils.validators import FormError

router = Router()


def _is_admin(message: Message) -> bool:
    try:
        return int(message.from_user.id) == int(settings.admin_id)
    except Exception:
        return False


async def _require_login(message: Message, storefront: Storefront) -> bool:
    if storefront.session.is_authenticated():
        return True
    await message.answer("🔒 Please sign in first: /login or /signup", reply_markup=guest_kb())
    return False


def _parse_product_id(text: Optional[str]) -> Optional[int]:
    parts = (text or "").split()
    if len(parts) != 2:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None


def _cart_text(storefront: Storefront) -> str:
    cart = storefront.cart
    if cart.is_empty:
        return "🧺 Your cart is empty"
    lines = ["<b>Your cart:</b>"]
    for it in cart.items:
        lines.append(f"• #{it.product_id} {escape(it.name)} × {it.quantity} — {money(it.line_total)}")
    totals = cart.get_totals()
    lines.append("")
    lines.append(f"Subtotal: {money(totals.subtotal)}")
    lines.append(f"Tax: {money(totals.tax)}")
    lines.append(f"<b>Total: {money(totals.total)}</b>")
    lines.append(f"Items: {cart.get_item_count()}")
    return "\n".join(lines)


# ---------------- basics ----------------

@router.message(Command("start"))
async def cmd_start(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if storefront.session.is_authenticated():
        user = storefront.session.get_current_user() or {}
        name = escape(str(user.get("name") or user.get("email") or ""))
        await message.answer(f"🍫 Welcome back {name}", reply_markup=main_kb())
        return
    await message.answer("🍫 ChocoBlitz. Sign in to start shopping.", reply_markup=guest_kb())


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.clear()
    await message.answer("❎ Cancelled.", reply_markup=ReplyKeyboardRemove())


@router.message(Command("help"))
async def cmd_help(message: Message):
    if not _is_admin(message):
        return

    text = (
        "<b>ChocoBlitz — commands</b>\n\n"
        "<b>Account</b>\n"
        "/login — sign in\n"
        "/signup — create an account\n"
        "/logout — sign out (empties the cart)\n\n"
        "<b>Catalog</b>\n"
        f"/catalog [{'|'.join(CATEGORIES)}] — list chocolates\n"
        "/product ID — details\n\n"
        "<b>Cart</b>\n"
        "/add ID — add one\n"
        "/inc ID, /dec ID — change quantity\n"
        "/remove ID — remove the line\n"
        "/cart — show cart\n"
        "/clear — empty the cart\n"
        "/checkout — place the order\n"
        "/cancel — abort the current dialog\n"
    )
    await message.answer(text)


# ---------------- login ----------------

@router.message(Command("login"))
async def cmd_login(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.clear()
    await state.set_state(LoginForm.waiting_email)
    await message.answer("1/3) Email:\nCancel: /cancel", reply_markup=ReplyKeyboardRemove())


@router.message(LoginForm.waiting_email)
async def login_email(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.update_data(email=(message.text or "").strip())
    await state.set_state(LoginForm.waiting_password)
    await message.answer("2/3) Password:\nCancel: /cancel")


@router.message(LoginForm.waiting_password)
async def login_password(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.update_data(password=message.text or "")
    await state.set_state(LoginForm.waiting_remember)
    await message.answer("3/3) Remember me?\nCancel: /cancel", reply_markup=yes_no_kb())


@router.message(LoginForm.waiting_remember)
async def login_remember(message: Message, state: FSMContext, storefront: Storefront):
    if not _is_admin(message):
        return

    data = await state.get_data()
    await state.clear()
    try:
        await storefront.session.login(
            str(data.get("email", "")),
            str(data.get("password", "")),
            remember_me=(message.text or "").strip() == YES,
        )
    except (FormError, AuthError) as e:
        await message.answer(f"❌ {escape(str(e))}\nTry again: /login", reply_markup=guest_kb())
        return

    await message.answer("✅ Signed in", reply_markup=main_kb())


# ---------------- signup ----------------

@router.message(Command("signup"))
async def cmd_signup(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.clear()
    await state.set_state(SignupForm.waiting_name)
    await message.answer("1/5) Your name:\nCancel: /cancel", reply_markup=ReplyKeyboardRemove())


@router.message(SignupForm.waiting_name)
async def signup_name(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.update_data(name=(message.text or "").strip())
    await state.set_state(SignupForm.waiting_email)
    await message.answer("2/5) Email:\nCancel: /cancel")


@router.message(SignupForm.waiting_email)
async def signup_email(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.update_data(email=(message.text or "").strip())
    await state.set_state(SignupForm.waiting_password)
    await message.answer(f"3/5) Password (at least {settings.min_password_length} characters):\nCancel: /cancel")


@router.message(SignupForm.waiting_password)
async def signup_password(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.update_data(password=message.text or "")
    await state.set_state(SignupForm.waiting_confirm)
    await message.answer("4/5) Repeat the password:\nCancel: /cancel")


@router.message(SignupForm.waiting_confirm)
async def signup_confirm(message: Message, state: FSMContext):
    if not _is_admin(message):
        return
    await state.update_data(confirm_password=message.text or "")
    await state.set_state(SignupForm.waiting_terms)
    await message.answer("5/5) Do you agree to the Terms & Conditions?\nCancel: /cancel", reply_markup=yes_no_kb())


@router.message(SignupForm.waiting_terms)
async def signup_terms(message: Message, state: FSMContext, storefront: Storefront):
    if not _is_admin(message):
        return

    data = await state.get_data()
    await state.clear()
    try:
        await storefront.session.register(
            str(data.get("name", "")),
            str(data.get("email", "")),
            str(data.get("password", "")),
            str(data.get("confirm_password", "")),
            agree_terms=(message.text or "").strip() == YES,
        )
    except (FormError, AuthError) as e:
        await message.answer(f"❌ {escape(str(e))}\nTry again: /signup", reply_markup=guest_kb())
        return

    await message.answer("✅ Account created, you are signed in", reply_markup=main_kb())


@router.message(Command("logout"))
async def cmd_logout(message: Message, state: FSMContext, storefront: Storefront):
    if not _is_admin(message):
        return
    await state.clear()
    storefront.logout()
    await message.answer("👋 Signed out", reply_markup=guest_kb())


# ---------------- catalog ----------------

@router.message(Command("catalog"))
async def cmd_catalog(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return

    parts = (message.text or "").split(maxsplit=1)
    category = parts[1].strip().lower() if len(parts) > 1 else FILTER_ALL
    if category != FILTER_ALL and category not in CATEGORIES:
        await message.answer(f"Unknown category. Use one of: {', '.join(storefront.catalog.categories())}")
        return

    products = storefront.catalog.filter(category)
    title = CATEGORIES.get(category, "All")
    lines = [f"<b>{title} chocolates:</b>"]
    for p in products:
        lines.append(f"• #{p.id} {escape(p.name)} — {money(p.price)}")
    await message.answer("\n".join(lines))


@router.message(Command("product"))
async def cmd_product(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return

    product_id = _parse_product_id(message.text)
    product = storefront.catalog.find_by_id(product_id) if product_id is not None else None
    if product is None:
        await message.answer("Format: /product ID (see /catalog)")
        return

    await message.answer(
        f"<b>{escape(product.name)}</b>\n"
        f"{escape(product.description)}\n\n"
        f"{money(product.price)}\n"
        f"Add to cart: /add {product.id}"
    )


# ---------------- cart ----------------

@router.message(Command("add"))
async def cmd_add(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return

    product_id = _parse_product_id(message.text)
    if product_id is None:
        await message.answer("Format: /add ID")
        return

    item = storefront.cart.add_item(product_id)
    if item is None:
        await message.answer("Product not found, see /catalog")
        return
    await message.answer(
        f"✅ {escape(item.name)} × {item.quantity} in cart (items: {storefront.cart.get_item_count()})"
    )


async def _change_quantity(message: Message, storefront: Storefront, delta: int, usage: str):
    product_id = _parse_product_id(message.text)
    if product_id is None:
        await message.answer(f"Format: {usage} ID")
        return
    storefront.cart.update_quantity(product_id, delta)
    await message.answer(_cart_text(storefront))


@router.message(Command("inc"))
async def cmd_inc(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return
    await _change_quantity(message, storefront, 1, "/inc")


@router.message(Command("dec"))
async def cmd_dec(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return
    await _change_quantity(message, storefront, -1, "/dec")


@router.message(Command("remove"))
async def cmd_remove(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return

    product_id = _parse_product_id(message.text)
    if product_id is None:
        await message.answer("Format: /remove ID")
        return
    storefront.cart.remove_item(product_id)
    await message.answer(_cart_text(storefront))


@router.message(Command("cart"))
async def cmd_cart(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return
    await message.answer(_cart_text(storefront))


@router.message(Command("clear"))
async def cmd_clear(message: Message, state: FSMContext, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return
    await state.set_state(ClearCart.waiting_confirm)
    await message.answer("Are you sure you want to clear your cart?", reply_markup=yes_no_kb())


@router.message(ClearCart.waiting_confirm)
async def clear_confirm(message: Message, state: FSMContext, storefront: Storefront):
    if not _is_admin(message):
        return
    await state.clear()
    if (message.text or "").strip() != YES:
        await message.answer("Cart kept.", reply_markup=main_kb())
        return
    storefront.cart.clear()
    await message.answer("🧺 Cart cleared", reply_markup=main_kb())


@router.message(Command("checkout"))
async def cmd_checkout(message: Message, storefront: Storefront):
    if not _is_admin(message):
        return
    if not await _require_login(message, storefront):
        return
    try:
        receipt = storefront.checkout()
    except CheckoutError as e:
        await message.answer(f"⚠️ {e}")
        return
    await message.answer(f"✅ {receipt.message}", reply_markup=main_kb())

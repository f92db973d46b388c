from django.conf import settings
from num2words import num2words

from .money import to_money


def _spell(number):
    # num2words gives "twenty-one thousand, five hundred"
    words = num2words(number, lang="en").replace("-", " ").replace(",", "")
    return " ".join(w if w == "and" else w.capitalize() for w in words.split())


def amount_in_words(amount, major=None, minor=None):
    """
    Spell an amount the way it is printed on invoices and receipts,
    e.g. 21500 -> "Twenty One Thousand Five Hundred Naira Only".
    """
    if major is None or minor is None:
        default_major, default_minor = settings.BILLING_CURRENCY_WORDS
        major = major or default_major
        minor = minor or default_minor

    amount = to_money(amount)
    if amount < 0:
        raise ValueError("Cannot spell a negative amount")

    whole = int(amount)
    fraction = int((amount - whole) * 100)

    if whole == 0 and fraction == 0:
        return f"Zero {major} Only"

    text = f"{_spell(whole)} {major}"
    if fraction:
        text += f" and {_spell(fraction)} {minor}"
    return f"{text} Only"

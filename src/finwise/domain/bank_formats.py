"""Bank export formats: fingerprint detection and per-line decoders.

Each supported format is described by a :class:`FormatSpec` holding the
header fingerprints used for detection and the decoder turning the fields of
one data line into a transaction candidate. Decoders never raise; a line they
cannot use decodes to ``None``.

ING (Dutch current account export)::

    "Datum","Naam/Omschrijving","Rekening","Tegenrekening","Code","Af Bij","Bedrag","MutatieSoort","Mededelingen"
    "01-01-2024","Albert Heijn","NL1","NL2","BA","Af","25,50","Betaalautomaat",""

Revolut::

    Type,Product,Started Date,Completed Date,Description,Amount,Fee,Currency,State,Balance
    CARD_PAYMENT,Current,2024-01-03 10:00:00,2024-01-04 09:12:00,Albert Heijn,-25.50,0.00,EUR,COMPLETED,974.50
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from finwise.domain.categorizer import categorize
from finwise.domain.entities import BankFormat, TransactionType
from finwise.domain.errors import InvalidAmount, InvalidDate
from finwise.logging_setup import get_logger
from finwise.utils.amount_parser import parse_amount, parse_signed_amount
from finwise.utils.date_parser import DateFormat, parse_date

logger = get_logger(__name__)

UNKNOWN_DESCRIPTION = "Unknown transaction"

Candidate = dict[str, Any]
Decoder = Callable[[Sequence[str]], Optional[Candidate]]


@dataclass(frozen=True)
class FormatSpec:
    """Detection fingerprints and decoder for one bank format."""

    bank_format: BankFormat
    name: str
    columns: tuple[str, ...]
    date_format: DateFormat
    fingerprints: tuple[str, ...]
    decoder: Decoder

    def matches(self, content_lower: str) -> bool:
        return any(fingerprint in content_lower for fingerprint in self.fingerprints)


def _field(fields: Sequence[str], index: int) -> str:
    if index >= len(fields):
        return ""
    return fields[index].strip()


def _candidate(txn_date, description: str, amount, direction: TransactionType) -> Candidate:
    return {
        "date": txn_date.isoformat(),
        "description": description,
        "amount": amount,
        "type": direction.value,
        "category": categorize(description),
    }


ING_DIRECTIONS = {
    "af": TransactionType.EXPENSE,
    "bij": TransactionType.INCOME,
}


def decode_ing_line(fields: Sequence[str]) -> Optional[Candidate]:
    """Decode one ING export line.

    Columns used: 0 date (DD-MM-YYYY), 1 description, 5 direction
    ("Af"/"Bij"), 6 amount with decimal comma.
    """
    if len(fields) < 7:
        logger.debug("ING line has insufficient columns (%d)", len(fields))
        return None

    date_str = _field(fields, 0)
    description = _field(fields, 1) or UNKNOWN_DESCRIPTION
    direction_str = _field(fields, 5)
    amount_str = _field(fields, 6)

    if not date_str or not amount_str or not direction_str:
        logger.debug(
            "ING line missing required fields: date=%r, amount=%r, direction=%r",
            date_str,
            amount_str,
            direction_str,
        )
        return None

    direction = ING_DIRECTIONS.get(direction_str.lower())
    if direction is None:
        logger.debug("ING line has unknown direction %r", direction_str)
        return None

    try:
        txn_date = parse_date(date_str, DateFormat.DD_MM_YYYY)
        amount = parse_amount(amount_str, decimal_comma=True)
    except (InvalidDate, InvalidAmount) as e:
        logger.debug("Skipping ING line: %s", e)
        return None

    return _candidate(txn_date, description, amount, direction)


REVOLUT_SKIPPED_TYPES = frozenset({"EXCHANGE"})


def decode_revolut_line(fields: Sequence[str]) -> Optional[Candidate]:
    """Decode one Revolut export line.

    Columns used: 0 type, 2 started date, 3 completed date, 4 description,
    5 signed amount. Currency exchanges are not transactions and decode to
    None.
    """
    if len(fields) < 6:
        logger.debug("Revolut line has insufficient columns (%d)", len(fields))
        return None

    txn_type = _field(fields, 0)
    if txn_type.upper() in REVOLUT_SKIPPED_TYPES:
        return None

    date_str = _field(fields, 3) or _field(fields, 2)
    description = _field(fields, 4) or UNKNOWN_DESCRIPTION

    try:
        txn_date = parse_date(date_str, DateFormat.ISO)
        amount = parse_signed_amount(_field(fields, 5), decimal_comma=False)
    except (InvalidDate, InvalidAmount) as e:
        logger.debug("Skipping Revolut line: %s", e)
        return None

    direction = TransactionType.INCOME if amount > 0 else TransactionType.EXPENSE
    return _candidate(txn_date, description, abs(amount), direction)


def is_skipped_line(bank_format: BankFormat, fields: Sequence[str]) -> bool:
    """Return True for lines a format ignores on purpose (not failures)."""
    if bank_format == BankFormat.REVOLUT:
        return _field(fields, 0).upper() in REVOLUT_SKIPPED_TYPES
    return False


# Detection order: the first spec whose fingerprint matches wins. ING header
# phrases are checked before the loose "revolut" token, so ING exports that
# mention Revolut transfers still detect as ING.
FORMATS: tuple[FormatSpec, ...] = (
    FormatSpec(
        bank_format=BankFormat.ING,
        name="ING Bank",
        columns=(
            "Datum",
            "Naam/Omschrijving",
            "Rekening",
            "Tegenrekening",
            "Code",
            "Af Bij",
            "Bedrag",
            "MutatieSoort",
            "Mededelingen",
        ),
        date_format=DateFormat.DD_MM_YYYY,
        fingerprints=("naam/omschrijving", "af bij", "mutatiesoort"),
        decoder=decode_ing_line,
    ),
    FormatSpec(
        bank_format=BankFormat.REVOLUT,
        name="Revolut",
        columns=(
            "Type",
            "Product",
            "Started Date",
            "Completed Date",
            "Description",
            "Amount",
            "Fee",
            "Currency",
            "State",
            "Balance",
        ),
        date_format=DateFormat.ISO,
        fingerprints=("type,product,started date", "completed date", "revolut"),
        decoder=decode_revolut_line,
    ),
)

_FORMATS_BY_TAG = {spec.bank_format: spec for spec in FORMATS}


def get_format_spec(bank_format: BankFormat) -> FormatSpec:
    """Return the spec for a supported format.

    Raises:
        ValueError: If the format has no decoder
    """
    spec = _FORMATS_BY_TAG.get(BankFormat(bank_format))
    if spec is None:
        raise ValueError(f"Unsupported bank format '{BankFormat(bank_format).value}'")
    return spec


def detect_format(content: str) -> BankFormat:
    """Detect the export format from header/content fingerprints.

    Returns:
        Matching format, or BankFormat.UNKNOWN when nothing matches
    """
    content_lower = content.lower()
    for spec in FORMATS:
        if spec.matches(content_lower):
            return spec.bank_format
    return BankFormat.UNKNOWN


def decode_line(bank_format: BankFormat, fields: Sequence[str]) -> Optional[Candidate]:
    """Decode a tokenized data line with the decoder of ``bank_format``."""
    return get_format_spec(bank_format).decoder(fields)

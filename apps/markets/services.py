"""
Market Services Module
======================

Trader registration and trader QR codes.

Classes:
    TraderQRCode: Builds and renders the QR payload collectors scan to
        identify a trader when taking a levy payment.

Example:
    Registering a trader with building line items::

        from apps.markets.services import register_trader

        trader = register_trader(
            market_id=market.id,
            trader_name='Ada Obi',
            business_name='Ada Provisions',
            tin='TIN-0001',
            occupancy_type=OccupancyType.SHOP,
            building_types=[{'building_type': BuildingType.SHOP, 'count': 2}],
        )
"""

import logging
from decimal import Decimal
from io import BytesIO
from typing import Optional

from django.db import transaction, IntegrityError

from .exceptions import (
    MarketNotFoundError,
    TraderNotFoundError,
    CaretakerNotFoundError,
    DuplicateTINError,
    InvalidLevyOverrideError,
    InvalidQRCodeError,
    InvalidIdentifierError,
)
from .identifiers import normalize_id, normalize_optional_id, IdLike
from .models import Market, Trader, TraderBuildingType, Caretaker, MarketSection

logger = logging.getLogger(__name__)


@transaction.atomic
def register_trader(
    *,
    market_id: IdLike,
    trader_name: str,
    business_name: str,
    tin: str,
    occupancy_type: str,
    business_type: str = '',
    caretaker_id: Optional[IdLike] = None,
    section_id: Optional[IdLike] = None,
    building_types: Optional[list[dict]] = None,
    levy_amount: Optional[Decimal] = None,
    levy_frequency: Optional[str] = None,
    user=None
) -> Trader:
    """
    Register a trader in a market.

    Args:
        market_id: Market the trader trades in
        trader_name: Name of the person
        business_name: Trading name
        tin: Tax identification number (unique)
        occupancy_type: OccupancyType value
        business_type: Free-text line of business
        caretaker_id: Caretaker responsible for the trader (same market)
        section_id: Market section
        building_types: List of {'building_type', 'count'} dicts
        levy_amount: Optional trader-level levy amount
        levy_frequency: Optional trader-level levy frequency
        user: Optional login account of the trader

    Returns:
        Created Trader instance

    Raises:
        MarketNotFoundError: If market doesn't exist
        CaretakerNotFoundError: If caretaker doesn't work this market
        InvalidLevyOverrideError: If only one override field is given
        DuplicateTINError: If TIN already registered
    """
    market_id = normalize_id(market_id)
    try:
        market = Market.objects.get(id=market_id)
    except Market.DoesNotExist:
        raise MarketNotFoundError(f"Market {market_id} not found")

    caretaker = None
    caretaker_id = normalize_optional_id(caretaker_id)
    if caretaker_id:
        caretaker = Caretaker.objects.filter(id=caretaker_id, market=market).first()
        if caretaker is None:
            raise CaretakerNotFoundError(
                f"Caretaker {caretaker_id} does not work in market {market.name}"
            )

    section = None
    section_id = normalize_optional_id(section_id)
    if section_id:
        section = MarketSection.objects.filter(id=section_id, market=market).first()

    if (levy_amount is None) != (levy_frequency is None):
        raise InvalidLevyOverrideError(
            "Trader levy override needs both an amount and a frequency"
        )

    tin = tin.strip().upper()
    if Trader.objects.filter(tin=tin).exists():
        raise DuplicateTINError(f"A trader with TIN {tin} already exists")

    try:
        trader = Trader.objects.create(
            market=market,
            caretaker=caretaker,
            section=section,
            user=user,
            trader_name=trader_name,
            business_name=business_name,
            business_type=business_type,
            tin=tin,
            occupancy_type=occupancy_type,
            levy_amount=levy_amount,
            levy_frequency=levy_frequency,
        )
    except IntegrityError:
        raise DuplicateTINError(f"A trader with TIN {tin} already exists")

    for item in building_types or []:
        TraderBuildingType.objects.create(
            trader=trader,
            building_type=item['building_type'],
            count=item.get('count', 1),
        )

    logger.info("Registered trader %s in market %s", trader.id, market.id)
    return trader


def get_trader(*, trader_id: IdLike) -> Trader:
    """Fetch a trader with market and caretaker, raising TraderNotFoundError."""
    trader_id = normalize_id(trader_id)
    try:
        return Trader.objects.select_related('market', 'caretaker').get(id=trader_id)
    except Trader.DoesNotExist:
        raise TraderNotFoundError(f"Trader {trader_id} not found")


class TraderQRCode:
    """
    QR payloads for traders.

    Payload format::

        TRADER:<trader uuid>

    Collectors scan it to pull up the trader when recording a levy.
    """

    PREFIX = 'TRADER:'

    @staticmethod
    def build_payload(trader):
        return f"{TraderQRCode.PREFIX}{trader.id}"

    @staticmethod
    def parse_payload(payload):
        """
        Extract the trader id from a scanned payload.

        Raises:
            InvalidQRCodeError: If the payload is not a trader QR code
        """
        if not payload or not payload.strip().upper().startswith(TraderQRCode.PREFIX):
            raise InvalidQRCodeError("Not a trader QR code")
        try:
            return normalize_id(payload.strip()[len(TraderQRCode.PREFIX):])
        except InvalidIdentifierError:
            raise InvalidQRCodeError("Trader QR code carries an invalid id")

    @staticmethod
    def find_trader(payload):
        trader_id = TraderQRCode.parse_payload(payload)
        return get_trader(trader_id=trader_id)

    @staticmethod
    def render_png(payload):
        """
        Render a payload as PNG bytes.

        Uses error correction level M, same box size and border as printed
        market stickers.
        """
        import qrcode

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format='PNG')
        return buffer.getvalue()

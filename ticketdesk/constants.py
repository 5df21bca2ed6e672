class TicketType:
    """
    Ticket types. The value is also the prefix of the ticket code.
    """
    VIP = 'VIP'
    GENERAL = 'GEN'

    ALL = (VIP, GENERAL)


class PaymentStatus:
    PAGADO = 'PAGADO'
    POR_PAGAR = 'POR_PAGAR'
    GRATIS = 'GRATIS'

    ALL = (PAGADO, POR_PAGAR, GRATIS)


# Number of digits after the "{tipo}-" prefix
TICKET_SUFFIX_DIGITS = 6

DEFAULT_PRICE_VIP = 40
DEFAULT_PRICE_GENERAL = 25

# Display name used when the identity provider returns none
ANONYMOUS_STAFF_NAME = 'Usuario Anónimo'

# Spreadsheet layout: codes in A, mirrored data in B..F
SHEET_CODE_COLUMN = 'A'
SHEET_FIRST_DATA_COLUMN = 'B'
SHEET_LAST_DATA_COLUMN = 'F'
SHEET_EMPTY_ROW = ['', '', '', '', '']

SHEET_TIMESTAMP_FORMAT = '%d/%m/%Y, %H:%M:%S'

"""
Pytest configuration and fixtures.
"""
import sys
import os
import pytest

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__) + '/..'))


class FakeSheetsClient:
    """
    In-memory stand-in for SheetsClient. Each tab is a list of rows with
    cells A..F; row 1 is a header, codes are provisioned from row 2.
    """
    COLUMNS = 'ABCDEF'

    def __init__(self, spreadsheet_id='test-spreadsheet'):
        self.spreadsheet_id = spreadsheet_id
        self.tabs = {}
        self.writes = []
        self.column_reads = 0
        self.fail_with = None

    def provision(self, tab, codes, header='Ticket'):
        rows = self.tabs.setdefault(tab, [[header, 'Vendedor', 'Fecha', 'Comprador', 'Estado', 'Monto']])
        for code in codes:
            rows.append([code, '', '', '', '', ''])
        return self

    def provision_at(self, tab, code, row):
        rows = self.tabs.setdefault(tab, [])
        while len(rows) < row:
            rows.append(['', '', '', '', '', ''])
        rows[row - 1] = [code, '', '', '', '', '']
        return self

    def row(self, tab, row):
        """Cells B..F of a row."""
        return self.tabs[tab][row - 1][1:]

    def row_of(self, tab, code):
        for position, cells in enumerate(self.tabs.get(tab, [])):
            if cells[0] == code:
                return position + 1
        return None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def read_column(self, tab, column):
        self._check()
        self.column_reads += 1
        index = self.COLUMNS.index(column)
        values = [[cells[index]] if cells[index] != '' else [] for cells in self.tabs.get(tab, [])]
        while values and not values[-1]:
            values.pop()
        return values

    def read_cell(self, tab, column, row):
        self._check()
        rows = self.tabs.get(tab, [])
        if row > len(rows):
            return ''
        return rows[row - 1][self.COLUMNS.index(column)]

    def write_row(self, tab, row, start_column, end_column, values, raw=False):
        self._check()
        start = self.COLUMNS.index(start_column)
        end = self.COLUMNS.index(end_column)
        assert end - start + 1 == len(values)
        cells = self.tabs[tab][row - 1]
        for offset, value in enumerate(values):
            cells[start + offset] = value
        self.writes.append((tab, row, list(values), raw))
        return {'updatedCells': len(values)}


class TestConfigBase:
    TESTING = True
    SERVER_NAME = 'localhost.localdomain'
    SPREADSHEET_ID = 'test-spreadsheet'
    MIRROR_ENABLED = True
    SHEET_ROW_CACHE_TIMEOUT = 0
    GOOGLE_CLIENT_ID = None
    GOOGLE_CLIENT_SECRET = None


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    from ticketdesk import create_app
    from config import Config

    class TestConfig(TestConfigBase, Config):
        import tempfile
        db_fd, db_path = tempfile.mkstemp()
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'

    app = create_app(TestConfig)

    # Initialize database
    with app.app_context():
        from ticketdesk import db
        db.create_all()

    return app


@pytest.fixture(scope='function', autouse=True)
def clean_db(app):
    """Clean database between tests."""
    with app.app_context():
        from ticketdesk import db, cache
        # Drop all tables and recreate them to ensure a clean slate
        db.drop_all()
        db.create_all()
        cache.clear()
    yield


@pytest.fixture(scope='function', autouse=True)
def fake_sheets(app):
    """Installs an empty fake spreadsheet with both tabs provisioned."""
    from ticketdesk.sheets.client import EXTENSION_KEY

    fake = FakeSheetsClient()
    fake.provision(app.config['SHEET_TAB_VIP'], [])
    fake.provision(app.config['SHEET_TAB_GENERAL'], [])
    app.extensions[EXTENSION_KEY] = fake
    yield fake
    app.extensions.pop(EXTENSION_KEY, None)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def staff():
    from ticketdesk.auth.identity import StaffIdentity
    return StaffIdentity('Ana Torres')


@pytest.fixture(scope='function')
def logged_in_client(client, staff):
    with client.session_transaction() as sess:
        sess['_user_id'] = staff.get_id()
        sess['_fresh'] = True
    return client


@pytest.fixture(scope='function')
def make_tickets(app, staff):
    """Registers tickets through the service; returns their snapshots."""
    from ticketdesk.services.ticket_service import TicketService

    def _make(tipo, numeros, estado='PAGADO', comprador='Luis Rojas', contacto=''):
        with app.app_context():
            tickets = TicketService.register_tickets(
                staff.name, tipo, comprador, contacto,
                [{'numero': n, 'estado': estado} for n in numeros]
            )
            return [t.to_snapshot() for t in tickets]
    return _make

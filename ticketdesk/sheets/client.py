# ticketdesk/sheets/client.py
"""
Thin wrapper over the Google Sheets v4 values API.

Only the two calls the mirror needs: read one column of a tab, and write a
single row range. Credentials come from a service account (file path or
raw JSON in the config).
"""
import json
import threading

from flask import current_app
from googleapiclient.discovery import build
from google.oauth2 import service_account

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

EXTENSION_KEY = 'ticketdesk.sheets'

_build_lock = threading.Lock()


def a1_range(tab, start_column, start_row=None, end_column=None, end_row=None):
    """
    Builds an A1 range with a quoted tab name.

    a1_range('Tickets VIP', 'A')                -> "'Tickets VIP'!A:A"
    a1_range('Tickets VIP', 'B', 5, 'F', 5)     -> "'Tickets VIP'!B5:F5"
    """
    quoted = "'" + tab.replace("'", "''") + "'"
    if start_row is None:
        end_column = end_column or start_column
        return f"{quoted}!{start_column}:{end_column}"
    end_column = end_column or start_column
    end_row = end_row or start_row
    return f"{quoted}!{start_column}{start_row}:{end_column}{end_row}"


def _service_account_credentials(config):
    sa_json = config.get('GOOGLE_SERVICE_ACCOUNT_JSON')
    sa_path = config.get('GOOGLE_SERVICE_ACCOUNT_FILE')

    if sa_json:
        info = json.loads(sa_json)
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    if sa_path:
        return service_account.Credentials.from_service_account_file(sa_path, scopes=SCOPES)
    raise RuntimeError(
        "Sheets mirror requires GOOGLE_SERVICE_ACCOUNT_JSON or GOOGLE_SERVICE_ACCOUNT_FILE."
    )


class SheetsClient:
    def __init__(self, spreadsheet_id, service):
        self.spreadsheet_id = spreadsheet_id
        self._values = service.spreadsheets().values()

    @classmethod
    def from_config(cls, config):
        creds = _service_account_credentials(config)
        service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return cls(config['SPREADSHEET_ID'], service)

    def read_column(self, tab, column):
        """
        Returns the column as the API does: a list of rows, each a list with
        zero or one cell. Trailing empty rows are not returned.
        """
        result = self._values.get(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range(tab, column),
        ).execute()
        return result.get('values', [])

    def read_cell(self, tab, column, row):
        result = self._values.get(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range(tab, column, row),
        ).execute()
        values = result.get('values', [])
        if values and values[0]:
            return values[0][0]
        return ''

    def write_row(self, tab, row, start_column, end_column, values, raw=False):
        """
        Writes one row range. raw=False lets the sheet parse values the way
        typing them would (numbers, dates, formulas).
        """
        return self._values.update(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range(tab, start_column, row, end_column, row),
            valueInputOption="RAW" if raw else "USER_ENTERED",
            body={"values": [list(values)]},
        ).execute()


def get_sheets_client(app=None):
    """
    Returns the app's Sheets client, building it on first use.
    Tests install a fake under app.extensions[EXTENSION_KEY].
    """
    app = app or current_app._get_current_object()
    client = app.extensions.get(EXTENSION_KEY)
    if client is not None:
        return client
    with _build_lock:
        client = app.extensions.get(EXTENSION_KEY)
        if client is None:
            client = SheetsClient.from_config(app.config)
            app.extensions[EXTENSION_KEY] = client
        return client

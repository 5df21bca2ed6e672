"""
Staff identity for the current browser session.

There is no staff table: whoever signs in (with Google, or by typing a
name) is carried in the Flask-Login session and its remember-me cookie,
so the identity survives browser restarts on that machine. The id handed
to Flask-Login is the identity itself, encoded as compact JSON.
"""
import json

from flask_login import UserMixin


class StaffIdentity(UserMixin):
    def __init__(self, name, email=None, uid=None):
        self.name = name
        self.email = email
        self.uid = uid

    def __repr__(self):
        return f'<StaffIdentity {self.name}>'

    @property
    def is_manual(self):
        """True when the name was typed in rather than verified by Google."""
        return self.uid is None

    def get_id(self):
        data = {'name': self.name}
        if self.email:
            data['email'] = self.email
        if self.uid:
            data['uid'] = self.uid
        return json.dumps(data, separators=(',', ':'), sort_keys=True)

    @classmethod
    def from_id(cls, user_id):
        """Inverse of get_id(); returns None for anything malformed."""
        try:
            data = json.loads(user_id)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict) or not data.get('name'):
            return None
        return cls(data['name'], data.get('email'), data.get('uid'))

    @classmethod
    def manual(cls, nombre, apellido):
        return cls(f"{nombre.strip()} {apellido.strip()}")

    @classmethod
    def from_google(cls, userinfo, fallback_name):
        return cls(
            userinfo.get('name') or fallback_name,
            userinfo.get('email'),
            userinfo.get('sub'),
        )

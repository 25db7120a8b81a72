"""Directory service adapter (Active Directory via ADSI/ADO, pywin32)."""

from __future__ import annotations

import logging

from ..core.ports import DirectoryUser

logger = logging.getLogger(__name__)

EXPIRY_ATTRIBUTE = "msDS-UserPasswordExpiryTimeComputed"


def _escape_filter(value: str) -> str:
    for char, escaped in (("\\", "\\5c"), ("*", "\\2a"), ("(", "\\28"), (")", "\\29"), ("\x00", "\\00")):
        value = value.replace(char, escaped)
    return value


def _default_naming_context() -> str:
    import win32com.client

    return win32com.client.GetObject("LDAP://RootDSE").Get("defaultNamingContext")


def _search(base: str, ldap_filter: str, attributes: list[str]) -> list[dict]:
    import win32com.client

    connection = win32com.client.Dispatch("ADODB.Connection")
    connection.Provider = "ADsDSOObject"
    connection.Open("Active Directory Provider")
    try:
        query = f"<LDAP://{base}>;{ldap_filter};{','.join(attributes)};subtree"
        records, _ = connection.Execute(query)
        rows = []
        while not records.EOF:
            rows.append({name: records.Fields(name).Value for name in attributes})
            records.MoveNext()
        return rows
    finally:
        connection.Close()


def _read_large_integer(distinguished_name: str, attribute: str) -> int | None:
    import win32com.client

    user = win32com.client.GetObject(f"LDAP://{distinguished_name}")
    # Constructed attributes are only returned when requested explicitly
    user.GetInfoEx([attribute], 0)
    value = user.Get(attribute)
    if value is None:
        return None
    return (value.HighPart << 32) + (value.LowPart & 0xFFFFFFFF)


class ActiveDirectory:
    """DirectoryService backed by ADSI."""

    def find_user(self, account: str, search_base: str | None = None) -> DirectoryUser | None:
        base = search_base or _default_naming_context()
        ldap_filter = f"(&(objectCategory=person)(objectClass=user)(sAMAccountName={_escape_filter(account)}))"
        rows = _search(base, ldap_filter, ["distinguishedName", "givenName"])
        if not rows:
            logger.info("No directory entry for %s under %s", account, base)
            return None
        row = rows[0]
        return DirectoryUser(
            distinguished_name=row["distinguishedName"],
            given_name=row.get("givenName") or None,
        )

    def password_expiry_filetime(self, distinguished_name: str) -> int | None:
        return _read_large_integer(distinguished_name, EXPIRY_ATTRIBUTE)

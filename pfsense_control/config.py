"""Configuration constants for the pfSense control client."""

import os

# Connection defaults can also be supplied via PFSENSE_URL / PFSENSE_USER /
# PFSENSE_PASSWORD env vars
DEFAULT_URL = os.environ.get("PFSENSE_URL", "https://192.168.1.1/")
DEFAULT_USER = os.environ.get("PFSENSE_USER", "admin")
DEFAULT_PASSWORD = os.environ.get("PFSENSE_PASSWORD", "")

USER_AGENT = "pfsense-control/1.0 (python-requests)"

REQUEST_TIMEOUT = 30   # seconds per HTTP request
MAX_RETRIES     = 0    # connection retries; a failed request surfaces immediately

SESSION_COOKIE = "PHPSESSID"
CSRF_FIELD     = "__csrf_magic"

# Pages, relative to the appliance root URL
LOGIN_PATH      = "index.php"
GATEWAYS_PATH   = "system_gateways.php"
INTERFACES_PATH = "status_interfaces.php"
OPENVPN_PATH    = "status_openvpn.php"
SERVICES_PATH   = "status_services.php"

# Login form
LOGIN_FORM_SELECTOR = "form.login"
LOGIN_USER_FIELD    = "usernamefld"
LOGIN_PASS_FIELD    = "passwordfld"
LOGIN_SUBMIT        = ("login", "Sign In")

# Gateways page
GATEWAYS_TABLE_ID = "gateways"
DEFAULT_GW_FIELDS = {4: "defaultgw4", 6: "defaultgw6"}
SAVE_SUBMIT       = ("save", "Save")
APPLY_SUBMIT      = ("apply", "Apply Changes")

# Interfaces page
DHCP_RELEASE = "Release"
DHCP_RENEW   = "Renew"

# OpenVPN status page
CLIENT_STATS_TITLE        = "Client Instance Statistics"
CLIENT_CONNECTIONS_TITLE  = "Client Connections"
CLIENT_INSTANCE_CELLS     = 8
CLIENT_CONNECTION_CELLS   = 6

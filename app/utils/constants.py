# app/utils/constants.py

# --- Application Information ---
APP_NAME_DEFAULT = "LineItemBoard"
VERSION = "1.0.0"

# --- Profiles ---
PROFILE_SYSTEM_ADMINISTRATOR = "System Administrator"
PROFILE_SALES = "Custom: Sales Profile"
PRIVILEGED_PROFILES = frozenset({PROFILE_SYSTEM_ADMINISTRATOR, PROFILE_SALES})

# --- Row actions ---
ACTION_DELETE = "delete"
ACTION_VIEW_PRODUCT = "viewProduct"

# --- Cell style classes (presentation detail, mapped to colours by the view) ---
STYLE_QUANTITY_ERROR = "slds-text-color_error slds-text-title_bold"
STYLE_QUANTITY_OK = "slds-text-color_success slds-text-title_bold"
STYLE_CELL_WARNING = "cell-warning"
STYLE_DELETE_WARNING = "slds-theme_warning"

# --- Labels ---
LABEL_PRODUCT_NAME = "Nom du produit"
LABEL_UNIT_PRICE = "Prix unitaire"
LABEL_TOTAL_PRICE = "Prix total"
LABEL_QUANTITY = "Quantité"
LABEL_STOCK = "Quantité restante"
LABEL_DELETE = "Supprimer"
LABEL_VIEW_PRODUCT = "Voir produit"
LABEL_REFRESH = "Rafraîchir"

# --- Messages ---
TOAST_TITLE_SUCCESS = "Succès"
TOAST_TITLE_ERROR = "Erreur"
MESSAGE_LINE_DELETED = "Produit supprimé."
MESSAGE_NO_LINES = "Aucun produit sur cette opportunité."
MESSAGE_CONFIRM_DELETE = "Voulez-vous vraiment supprimer cette ligne ?"
MESSAGE_CONFIRM_DELETE_TITLE = "Confirmer la suppression"
MESSAGE_OVERSTOCK_WARNING = (
    "⚠️ Vous avez au moins une ligne avec un problème de quantité. "
    "Veuillez supprimer cette ligne ou réduire sa quantité. "
    "Si vous avez absolument besoin de plus de produits, "
    "veuillez contacter votre administrateur système."
)

# --- Notification severities ---
SEVERITY_SUCCESS = "success"
SEVERITY_ERROR = "error"

# --- API ---
DEFAULT_API_TIMEOUT_SECONDS = 30
LINE_ITEMS_ENDPOINT = "/services/apexrest/opportunity-line-items"
USER_RECORD_ENDPOINT = "/services/data/ui-api/records"
USER_PROFILE_FIELD = "User.Profile.Name"

# Default log format and level (overridden by config)
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - [%(module)s.%(funcName)s:%(lineno)d] - %(message)s'
LOG_LEVEL = "INFO"

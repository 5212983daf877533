"""Static lookup tables: category taxonomy, rule tables and column aliases.

These tables are versioned with the package and loaded once into an
immutable Taxonomy (see models/category.py). A categories.yaml file may
replace the category part of them (see config.load_taxonomy).
"""

OTHERS_CATEGORY = "Others"

# Category taxonomy in display order.
# "merchants" are brand/counterparty substrings (tier 1, High confidence);
# "keywords" are generic words (tier 2, Medium confidence).
DEFAULT_CATEGORIES: list[dict[str, object]] = [
    {
        "name": "Food & Dining",
        "icon": "🍽️",
        "color": "#f59e0b",
        "merchants": [
            "zomato", "swiggy", "uber eats", "dominos", "domino's", "pizza hut",
            "mcdonalds", "mcdonald's", "kfc", "subway", "burger king", "starbucks",
            "cafe coffee day", "ccd", "chaayos", "haldiram", "barbeque nation",
            "box8", "faasos", "behrouz", "eatsure", "wow momo", "taco bell",
            "dunkin", "baskin robbins", "naturals ice cream", "third wave coffee",
            "blue tokai", "theobroma", "biryani blues", "paradise biryani",
        ],
        "keywords": [
            "restaurant", "food", "cafe", "dining", "pizza", "burger", "coffee",
            "meal", "lunch", "dinner", "breakfast", "snacks", "biryani", "dhaba",
            "bakery", "sweets", "canteen", "mess",
        ],
    },
    {
        "name": "Groceries",
        "icon": "🛒",
        "color": "#10b981",
        "merchants": [
            "bigbasket", "big basket", "blinkit", "grofers", "zepto", "dunzo",
            "swiggy instamart", "instamart", "jiomart", "dmart", "d mart",
            "reliance fresh", "reliance smart", "more retail", "more supermarket",
            "spencers", "nature's basket", "star bazaar", "amazon fresh",
            "flipkart minutes", "milkbasket", "country delight", "licious",
            "freshtohome", "ratnadeep", "vijetha",
        ],
        "keywords": [
            "grocery", "groceries", "supermarket", "hypermarket", "kirana",
            "provisions", "vegetables", "fruits", "dairy", "milk",
        ],
    },
    {
        "name": "Transport",
        "icon": "🚗",
        "color": "#3b82f6",
        "merchants": [
            "uber", "ola", "rapido", "blusmart", "namma yatri", "meru", "irctc",
            "redbus", "abhibus", "makemytrip", "goibibo", "cleartrip", "ixigo",
            "yatra", "indigo", "air india", "akasa", "spicejet", "vistara",
            "indian oil", "iocl", "hp petrol", "hpcl", "bharat petroleum", "bpcl",
            "shell", "nayara", "fastag", "dmrc", "bmrcl", "mumbai metro",
            "delhi metro", "yulu", "bounce",
        ],
        "keywords": [
            "fuel", "petrol", "diesel", "cab", "taxi", "auto", "metro", "bus",
            "train", "railway", "parking", "toll", "travel", "ride", "flight",
            "airline", "transport",
        ],
    },
    {
        "name": "Shopping",
        "icon": "🛍️",
        "color": "#8b5cf6",
        "merchants": [
            "amazon", "flipkart", "myntra", "ajio", "nykaa", "meesho", "tata cliq",
            "tatacliq", "snapdeal", "shoppers stop", "lifestyle", "westside",
            "pantaloons", "max fashion", "zudio", "h&m", "zara", "uniqlo",
            "decathlon", "ikea", "croma", "reliance digital", "vijay sales",
            "lenskart", "firstcry", "pepperfry", "urban ladder", "boat",
            "apple store", "samsung", "bewakoof", "purplle", "mamaearth",
        ],
        "keywords": [
            "shopping", "store", "mart", "mall", "clothes", "fashion", "shoes",
            "electronics", "retail", "boutique", "ecommerce",
        ],
    },
    {
        "name": "Entertainment",
        "icon": "🎬",
        "color": "#ef4444",
        "merchants": [
            "netflix", "amazon prime", "prime video", "hotstar", "disney",
            "jiocinema", "sonyliv", "zee5", "spotify", "youtube", "gaana",
            "wynk", "apple music", "bookmyshow", "pvr", "inox", "cinepolis",
            "steam", "playstation", "xbox", "dream11", "mpl", "paytm insider",
        ],
        "keywords": [
            "movie", "cinema", "entertainment", "game", "gaming", "concert",
            "theater", "theatre", "streaming", "subscription", "music",
        ],
    },
    {
        "name": "Bills & Utilities",
        "icon": "⚡",
        "color": "#f97316",
        "merchants": [
            "airtel", "jio", "vodafone", "vi prepaid", "bsnl", "act fibernet",
            "hathway", "tata play", "tata sky", "dish tv", "d2h", "sun direct",
            "bescom", "msedcl", "tneb", "tata power", "adani electricity",
            "bses", "cesc", "torrent power", "mahanagar gas", "indraprastha gas",
            "igl", "bharat gas", "indane", "hp gas", "electricity board",
            "gas company", "water board",
        ],
        "keywords": [
            "electricity", "electric", "bill", "recharge", "utility", "broadband",
            "wifi", "internet", "postpaid", "prepaid", "water", "gas", "dth",
            "municipal", "maintenance", "rent",
        ],
    },
    {
        "name": "Health & Medical",
        "icon": "🏥",
        "color": "#06b6d4",
        "merchants": [
            "apollo", "fortis", "medanta", "manipal", "narayana", "max healthcare",
            "netmeds", "1mg", "tata 1mg", "pharmeasy", "medplus", "truemeds",
            "practo", "cult.fit", "cultfit", "healthifyme", "dr lal", "thyrocare",
            "metropolis", "wellness forever",
        ],
        "keywords": [
            "hospital", "clinic", "doctor", "medical", "medicine", "pharmacy",
            "chemist", "health", "dental", "diagnostic", "lab test", "gym",
        ],
    },
    {
        "name": "Money Transfer",
        "icon": "💸",
        "color": "#84cc16",
        "merchants": [
            "western union", "wise", "remitly", "cred", "bhim",
        ],
        "keywords": [
            "transfer", "remittance", "sent to", "wallet", "p2p",
        ],
    },
    {
        "name": "Investment",
        "icon": "📈",
        "color": "#6366f1",
        "merchants": [
            "zerodha", "groww", "upstox", "angel one", "angel broking",
            "icicidirect", "icici direct", "hdfc securities", "kotak securities",
            "paytm money", "coin by zerodha", "kuvera", "smallcase", "indmoney",
            "etmoney", "lic", "hdfc life", "icici prudential", "sbi life",
            "max life", "policybazaar", "nps", "ppf",
        ],
        "keywords": [
            "mutual fund", "sip", "investment", "trading", "stocks", "shares",
            "equity", "insurance", "premium", "policy", "fixed deposit",
            "recurring deposit",
        ],
    },
    {
        "name": "Education",
        "icon": "📚",
        "color": "#d946ef",
        "merchants": [
            "udemy", "coursera", "byju", "unacademy", "vedantu", "upgrad",
            "simplilearn", "great learning", "physics wallah", "duolingo",
            "skillshare",
        ],
        "keywords": [
            "education", "school", "college", "university", "course", "tuition",
            "coaching", "exam", "books", "stationery", "fees", "training",
        ],
    },
    {
        "name": "Income",
        "icon": "💼",
        "color": "#22c55e",
        "merchants": [],
        "keywords": [],
    },
    {
        "name": "ATM Withdrawal",
        "icon": "🏧",
        "color": "#0ea5e9",
        "merchants": [],
        "keywords": [],
    },
    {
        "name": "Bank Charges",
        "icon": "🧾",
        "color": "#e11d48",
        "merchants": [],
        "keywords": [],
    },
    {
        "name": "Loan & EMI",
        "icon": "🏦",
        "color": "#a855f7",
        "merchants": [],
        "keywords": [],
    },
    {
        "name": OTHERS_CATEGORY,
        "icon": "📄",
        "color": "#6b7280",
        "merchants": [],
        "keywords": [],
    },
]

# Legacy or alternate names mapped to canonical category names
CATEGORY_ALIASES: dict[str, str] = {
    "Transportation": "Transport",
    "Travel": "Transport",
    "Transfer": "Money Transfer",
    "Transfers": "Money Transfer",
    "Bills": "Bills & Utilities",
    "Utilities": "Bills & Utilities",
    "Health": "Health & Medical",
    "Medical": "Health & Medical",
    "Food": "Food & Dining",
    "Dining": "Food & Dining",
    "Grocery": "Groceries",
    "Investments": "Investment",
    "Salary": "Income",
    "ATM": "ATM Withdrawal",
    "Cash Withdrawal": "ATM Withdrawal",
    "Charges": "Bank Charges",
    "Fees": "Bank Charges",
    "EMI": "Loan & EMI",
    "Loan": "Loan & EMI",
    "Other": OTHERS_CATEGORY,
    "Miscellaneous": OTHERS_CATEGORY,
}

# Special-pattern rules (tier 3), checked in order. Not merchant-bound.
SPECIAL_PATTERNS: list[tuple[str, str]] = [
    (
        "Income",
        r"\b(?:salary|sal\s+cr|payroll|stipend|dividend|bonus|refund|reversal|"
        r"cashback|cash\s+back|interest\s+(?:credit|paid)|int\.?\s*cr)\b",
    ),
    (
        "Money Transfer",
        r"\b(?:neft|imps|rtgs|upi\s*[-/]?\s*transfer|fund\s+transfer|bank\s+transfer|"
        r"self\s+transfer|money\s+transfer|a/c\s+transfer)\b",
    ),
    (
        "ATM Withdrawal",
        r"\b(?:atm|cash\s+withdrawal|cash\s+wdl|atw|nwd|cwdr)\b",
    ),
    (
        "Bank Charges",
        r"\b(?:service\s+charges?|bank\s+charges?|sms\s+charges?|annual\s+fee|"
        r"amc|gst\s+on|penalty|late\s+fee|processing\s+fee|min\s+bal|"
        r"non[-\s]maintenance|chrgs?|charges)\b",
    ),
    (
        "Loan & EMI",
        r"\b(?:emi|loan|nach|ecs|equated\s+monthly|bajaj\s+finserv|home\s+credit)\b",
    ),
]

# Tabular column aliases per provider, consulted in order.
# Matching is case-insensitive on trimmed header text: exact names first,
# then headers containing an alias ("Deposit Amount (INR)"). Headers naming a
# balance or a date never resolve as amount, debit or credit columns.
PROVIDER_COLUMN_ALIASES: dict[str, dict[str, list[str]]] = {
    "GPay": {
        "date": ["Date", "Transaction Date", "Date & Time"],
        "description": ["Description", "Transaction Details", "Details"],
        "amount": ["Amount", "Amount (INR)"],
        "type": ["Type", "Transaction Type"],
        "reference": ["Transaction ID", "transaction_id", "UPI Transaction ID"],
    },
    "PhonePe": {
        "date": ["Date", "Transaction Date", "Date & Time"],
        "description": ["Transaction Details", "Description", "Details"],
        "amount": ["Amount", "Amount (INR)"],
        "debit": ["Debit"],
        "credit": ["Credit"],
        "type": ["Type", "Transaction Type", "Debit/Credit"],
        "status": ["Status", "Transaction Status"],
        "reference": ["Transaction ID", "UTR No.", "UTR"],
    },
    "Paytm": {
        "date": ["Date", "Transaction Date", "Date & Time"],
        "description": ["Activity", "Description", "Transaction Details"],
        "amount": ["Amount", "Amount (INR)"],
        "type": ["Type", "Transaction Type"],
        "reference": ["Transaction ID", "Order ID", "UPI Ref No."],
    },
    "Bank": {
        "date": ["Date", "Transaction Date", "Txn Date", "Value Date", "Posting Date", "Tran Date"],
        "description": [
            "Description", "Transaction Details", "Particulars", "Narration",
            "Remarks", "Transaction Remarks",
        ],
        "amount": ["Amount", "Transaction Amount"],
        "debit": ["Debit", "Withdrawal", "Withdrawal Amt.", "Withdrawal Amount", "Debit Amount", "Dr"],
        "credit": ["Credit", "Deposit", "Deposit Amt.", "Deposit Amount", "Credit Amount", "Cr"],
        "type": ["Type", "Dr/Cr", "Cr/Dr", "Transaction Type"],
        "reference": ["Chq./Ref.No.", "Ref No./Cheque No.", "Reference No", "UTR"],
    },
}

# Generic header variants (strategy 2), consulted in order
GENERIC_COLUMN_VARIANTS: dict[str, list[str]] = {
    "date": [
        "date", "transaction date", "transaction_date", "txn date", "posting date",
        "posting_date", "value date", "date & time", "timestamp", "time",
    ],
    "description": [
        "description", "transaction details", "particulars", "details", "narration",
        "remarks", "activity", "merchant", "payee", "purpose", "note",
    ],
    "amount": [
        "amount", "transaction amount", "amt", "value", "debit", "withdrawal",
        "credit", "deposit", "inr", "rupees",
    ],
    "type": ["type", "transaction type", "dr/cr", "debit/credit", "cr/dr"],
}

# Source fingerprints in priority order: (tag, filename markers, content markers).
# Specific providers come before the Bank and generic UPI buckets.
SOURCE_FINGERPRINTS: list[tuple[str, tuple[str, ...], tuple[str, ...]]] = [
    ("GPay", ("gpay", "google pay", "googlepay"), ("google pay", "gpay")),
    ("PhonePe", ("phonepe", "phone pe", "phone_pe"), ("phonepe", "phone pe")),
    ("Paytm", ("paytm",), ("paytm", "one97")),
    (
        "Bank",
        ("bank", "statement", "account"),
        ("account statement", "bank statement", "current account", "savings account"),
    ),
    ("UPI", ("upi", "transaction"), ("upi", "unified payments")),
]

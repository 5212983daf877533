"""Prompt templates for AI categorization."""

from decimal import Decimal

CLASSIFICATION_SYSTEM_PROMPT = """You are a financial transaction categorizer for Indian \
UPI and bank statements. You answer with a single category name and nothing else."""


def build_classification_prompt(
    description: str,
    merchant: str,
    amount: Decimal,
    transaction_type: str,
    category_names: list[str],
) -> str:
    """Build a categorization prompt for a single transaction.

    Args:
        description: Transaction description.
        merchant: Resolved merchant name.
        amount: Non-negative amount in rupees.
        transaction_type: "debit" or "credit".
        category_names: Known category names, in display order.

    Returns:
        Formatted prompt string.
    """
    return f"""Categorize this transaction into one of these categories: {", ".join(category_names)}

Transaction Details:
- Description: {description}
- Merchant: {merchant}
- Amount: ₹{amount:.2f}
- Type: {transaction_type}

Respond with ONLY the category name from the list above. If none fit perfectly, choose the closest match."""

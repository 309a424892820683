"""
Intake Templates

Prompt and tool definition used when Claude is available to structure a
purchase request, plus the clarification question wording.
"""

from typing import Any, Dict


class IntakeTemplates:
    """
    Template strings for request parsing.
    """

    @staticmethod
    def system_prompt() -> str:
        """
        System instructions for parsing a procurement request.

        Returns:
            Prompt string
        """
        return """You are the intake analyst of a corporate procurement team. Your job is to turn a natural-language purchase request into structured line items.

# WHAT TO EXTRACT
- Every distinct item, with quantity (default 1), category, specifications and a realistic estimated unit price in USD
- Urgency: low, normal, high or critical
- Any budget the requester states (total, in USD), and your total budget estimate
- Any deadline, as an ISO 8601 date-time, or null
- A one-line plain-English summary

# CATEGORIES
IT Hardware, IT Peripherals, Office Furniture, Office Supplies, Office Equipment, Communications, Networking, Software, Services, Furniture, Other

# CLARIFICATION RULES
- If the requester gives no budget AND the item is too vague to price (e.g. "I need some equipment"), set needs_clarification to true and ask one specific question about budget in clarification_question.
- If a reasonable standard estimate exists (laptops, chairs, coffee), set needs_clarification to false.

Record your answer with the record_procurement_request tool.
"""

    @staticmethod
    def clarification_question(subject: str) -> str:
        """
        Question asked when neither a budget nor a price estimate is available.

        Args:
            subject: What the requester asked for

        Returns:
            Question string
        """
        return (
            f"What is your estimated budget per unit or total budget for {subject}? "
            f"I couldn't match the request to a known item, so I can't estimate a price."
        )

    @staticmethod
    def get_function_definition() -> Dict[str, Any]:
        """
        Tool definition Claude fills in with the parsed request.

        Returns:
            Tool definition dictionary for the Claude API
        """
        return {
            "name": "record_procurement_request",
            "description": "Record the structured reading of a procurement request",
            "input_schema": {
                "type": "object",
                "properties": {
                    "items": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "name": {"type": "string"},
                                "quantity": {"type": "integer", "minimum": 1},
                                "category": {"type": "string"},
                                "specifications": {"type": "string"},
                                "estimated_unit_price": {"type": "number", "minimum": 0}
                            },
                            "required": ["name", "quantity", "category"]
                        }
                    },
                    "urgency": {
                        "type": "string",
                        "enum": ["low", "normal", "high", "critical"]
                    },
                    "budget": {
                        "type": ["number", "null"],
                        "description": "Budget explicitly stated by the requester, if any"
                    },
                    "budget_estimate": {
                        "type": ["number", "null"],
                        "description": "Total estimated budget"
                    },
                    "deadline": {
                        "type": ["string", "null"],
                        "description": "ISO 8601 deadline or null"
                    },
                    "summary": {"type": "string"},
                    "needs_clarification": {"type": "boolean"},
                    "clarification_question": {"type": ["string", "null"]}
                },
                "required": ["items", "urgency", "summary", "needs_clarification"]
            }
        }

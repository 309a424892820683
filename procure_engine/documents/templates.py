"""
Document Templates

Plain-text layouts for the procurement documents. The renderer fills the
placeholders; every amount arrives already formatted.
"""

BUYER_NAME = "AuraProcure Corp"
BUYER_ADDRESS = "123 Procurement Ave, Suite 500\n            San Francisco, CA 94102"
BUYER_EMAIL = "procurement@auraprocure.ai"

RULE = "═══════════════════════════════════════════════"
DIVIDER = "───────────────────────────────────────────────"


class DocumentTemplates:
    """
    Template strings for RFQs, purchase orders and contract summaries.
    """

    @staticmethod
    def rfq_template() -> str:
        """
        Request for quotation sent to prospective vendors.

        Returns:
            Template with rfq_number, date, due_date, line_items placeholders
        """
        return RULE + """
            REQUEST FOR QUOTATION (RFQ)
""" + RULE + """

RFQ Number: {rfq_number}
Date:       {date}
Due Date:   {due_date}

""" + DIVIDER + """
FROM: """ + BUYER_NAME + """
TO:   [Prospective Vendors]
""" + DIVIDER + """

Dear Vendor,

We are requesting quotations for the following items:

{line_items}

REQUIREMENTS:
• Please provide unit pricing and volume discounts
• Include shipping costs and estimated delivery time
• Specify warranty terms
• Quote valid for minimum 30 days

Submit responses to: """ + BUYER_EMAIL + """

""" + RULE

    @staticmethod
    def rfq_line_item() -> str:
        return """{position}. {name}
   Quantity Required: {quantity}
   Specifications: {specifications}"""

    @staticmethod
    def purchase_order_template() -> str:
        """
        Purchase order issued to one vendor.

        Returns:
            Template with po_number, date, vendor_name, line_items, subtotal,
            tax, total and delivery_date placeholders
        """
        return RULE + """
                  PURCHASE ORDER
""" + RULE + """

PO Number:  {po_number}
Date:       {date}
Status:     {status}

""" + DIVIDER + """
BUYER
""" + DIVIDER + """
Company:    """ + BUYER_NAME + """
Address:    """ + BUYER_ADDRESS + """
Email:      """ + BUYER_EMAIL + """

""" + DIVIDER + """
VENDOR
""" + DIVIDER + """
Company:    {vendor_name}
Terms:      Net 30
Shipping:   Standard Ground

""" + DIVIDER + """
LINE ITEMS
""" + DIVIDER + """
{line_items}

""" + DIVIDER + """
                                SUBTOTAL:  {subtotal}
                                TAX ({tax_rate}):  {tax}
                                ─────────
                                TOTAL:     {total}
""" + DIVIDER + """

Delivery Date: {delivery_date}

TERMS & CONDITIONS
1. Delivery within agreed shipping timeframe
2. Payment terms: Net 30 from invoice date
3. Quality must meet stated specifications
4. Returns accepted within 30 days if defective

""" + DIVIDER + """
AUTHORIZATION
""" + DIVIDER + """
Approved By:    {approver}
Date:           {approved_date}

""" + RULE

    @staticmethod
    def purchase_order_line_item() -> str:
        return """{position}. {name}
   Qty: {quantity}  |  Unit: {unit_price}  |  Total: {line_total}"""

    @staticmethod
    def contract_summary_template() -> str:
        """
        Contract summary between the buyer and one vendor.

        Returns:
            Template with date, vendor_name, products, total, shipping_days,
            po_number and compliance_notes placeholders
        """
        return """CONTRACT SUMMARY

Reference:  {po_number}
Date:       {date}

Parties:
- Buyer: """ + BUYER_NAME + """
- Seller: {vendor_name}

Key Terms:
1. Products: {products}
2. Total Value: {total} (incl. tax)
3. Payment: Net 30 from delivery
4. Warranty: Standard manufacturer warranty
5. Delivery: Within {shipping_days} business days
6. Returns: 30-day DOA replacement policy

Compliance Notes:
{compliance_notes}"""

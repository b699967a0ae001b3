"""
Logistics Rule Tables

Delhivery, Ecom Express, Aramex, XpressBees, TCI Express, Safexpress, Gati,
Blue Dart, DTDC, FedEx, India Post

Courier emails carry a tracking number instead of an order id; it doubles
as the order id. Amounts are only present for COD or charged shipments.
"""

from mailorder.models import PlatformCategory, PlatformId

from .base import (
    COD_AMOUNT_RULES,
    COURIER_CONFIDENCE,
    COURIER_DATE_RULES,
    COURIER_DETAIL_RULES,
    COURIER_EMAIL_TYPES,
    COURIER_KEYWORDS,
    COURIER_STATUS_MAP,
    COURIER_STATUS_OVERRIDES,
    COURIER_TYPE_LABELS,
    TRACKING_LABELS,
    FieldRule,
    IdentifierShape,
    PlatformProfile,
    amount_rule,
    labelled_id_rule,
    rule,
    shape_id_rule,
)


LOGISTICS = PlatformCategory.LOGISTICS

TRACKING_VALUE = r"(?=[A-Z]{0,24}\d)[A-Z0-9]{8,25}"
TRACKING_SHAPE = IdentifierShape(min_length=8, max_length=25, allowed=r"[A-Z0-9]{8,25}")


def courier_profile(platform, display_name, indicators, sender_domains, order_id_rules, **overrides) -> PlatformProfile:
    """PlatformProfile with the courier lifecycle and sentinel amount label."""
    fields = dict(
        platform=platform,
        display_name=display_name,
        category=LOGISTICS,
        indicators=indicators,
        sender_domains=sender_domains,
        order_id_rules=order_id_rules,
        amount_category="courier",
        id_shape=TRACKING_SHAPE,
        order_keywords=COURIER_KEYWORDS,
        amount_rules=(),
        item_patterns=(),
        subject_item_rules=(),
        date_rules=COURIER_DATE_RULES,
        metadata_rules=COURIER_DETAIL_RULES,
        email_types=COURIER_EMAIL_TYPES,
        default_email_type="courier_notification",
        status_map=COURIER_STATUS_MAP,
        status_overrides=COURIER_STATUS_OVERRIDES,
        type_labels=COURIER_TYPE_LABELS,
        default_type_label="Package",
        placeholder_template="{description} - {label}",
        no_amount_label="Courier Service",
        id_is_tracking=True,
        carrier=display_name,
        confidence=COURIER_CONFIDENCE,
    )
    fields.update(overrides)
    return PlatformProfile(**fields)


DELHIVERY = courier_profile(
    PlatformId.DELHIVERY,
    "Delhivery",
    indicators=("delhivery.com", "@delhivery"),
    sender_domains=("delhivery.com", "delhivery"),
    order_id_rules=(
        labelled_id_rule("delhivery_awb", TRACKING_VALUE, labels=TRACKING_LABELS, priority=95),
    ),
)

ECOMEXPRESS = courier_profile(
    PlatformId.ECOMEXPRESS,
    "Ecom Express",
    indicators=("ecomexpress.in", "@ecomexpress", "ecom express"),
    sender_domains=("ecomexpress.in", "ecomexpress.com"),
    order_id_rules=(
        labelled_id_rule("ecomexpress_awb", TRACKING_VALUE, labels=TRACKING_LABELS, priority=95),
    ),
)

ARAMEX = courier_profile(
    PlatformId.ARAMEX,
    "Aramex",
    indicators=("aramex.com", "aramex.in", "@aramex"),
    sender_domains=("aramex.com", "aramex.in"),
    order_id_rules=(
        labelled_id_rule("aramex_awb", TRACKING_VALUE, labels=TRACKING_LABELS, priority=95),
    ),
    id_shape=IdentifierShape(min_length=8, max_length=25, allowed=r"[A-Z0-9]{10,20}"),
    no_amount_label="International Courier Service",
)

XPRESSBEES = courier_profile(
    PlatformId.XPRESSBEES,
    "Xpressbees",
    indicators=("xpressbees.com", "@xpressbees", "xpress bees"),
    sender_domains=("xpressbees.com",),
    order_id_rules=(
        labelled_id_rule("xpressbees_awb", TRACKING_VALUE, labels=TRACKING_LABELS, priority=95),
    ),
)

TCIEXPRESS = courier_profile(
    PlatformId.TCIEXPRESS,
    "TCI Express",
    indicators=("tciexpress.in", "@tciexpress", "tci express"),
    sender_domains=("tciexpress.in",),
    order_id_rules=(
        labelled_id_rule(
            "tciexpress_docket",
            TRACKING_VALUE,
            labels=TRACKING_LABELS + r"|docket\s{0,2}(?:no\.?|number)?|cn\s{0,2}(?:no\.?|number)",
            priority=95,
        ),
    ),
    no_amount_label="Express Service",
)

SAFEXPRESS = courier_profile(
    PlatformId.SAFEXPRESS,
    "Safexpress",
    indicators=("safexpress.com", "@safexpress"),
    sender_domains=("safexpress.com",),
    order_id_rules=(
        labelled_id_rule("safexpress_waybill", TRACKING_VALUE, labels=TRACKING_LABELS, priority=95),
    ),
    no_amount_label="Express Service",
)

GATI = courier_profile(
    PlatformId.GATI,
    "Gati",
    indicators=("gati.com", "@gati"),
    sender_domains=("gati.com",),
    order_id_rules=(
        labelled_id_rule(
            "gati_docket",
            TRACKING_VALUE,
            labels=TRACKING_LABELS + r"|docket\s{0,2}(?:no\.?|number)?",
            priority=95,
        ),
    ),
)

BLUEDART = courier_profile(
    PlatformId.BLUEDART,
    "Blue Dart",
    indicators=("bluedart.com", "bluedart.in", "@bluedart", "blue dart"),
    sender_domains=("bluedart.com", "bluedart.in"),
    order_id_rules=(
        labelled_id_rule(
            "bluedart_awb",
            r"(?=[A-Z]{0,14}\d)[A-Z0-9]{8,15}",
            labels=TRACKING_LABELS + r"|air\s{0,1}way\s{1,2}bill|reference\s{0,2}(?:no\.?|number|id)?",
            priority=95,
        ),
    ),
    id_shape=IdentifierShape(
        min_length=8,
        max_length=15,
        allowed=r"[A-Z0-9]{8,15}",
        exclude=(r"\d{6,8}",),
    ),
    amount_rules=COD_AMOUNT_RULES,
)

DTDC = courier_profile(
    PlatformId.DTDC,
    "DTDC",
    indicators=("dtdc.in", "dtdc.com", "@dtdc"),
    sender_domains=("dtdc.in", "dtdc.com"),
    order_id_rules=(
        labelled_id_rule(
            "dtdc_consignment",
            r"(?=[A-Z]{0,19}\d)[A-Z0-9]{8,20}",
            labels=TRACKING_LABELS + r"|reference\s{0,2}(?:no\.?|number)?|docket\s{0,2}(?:no\.?|number)?|track(?:ing)?\s{0,2}(?:no\.?|number|id)?",
            priority=95,
        ),
    ),
    amount_rules=COD_AMOUNT_RULES,
)

FEDEX = courier_profile(
    PlatformId.FEDEX,
    "FedEx",
    indicators=("fedex.com", "fedex.in", "@fedex"),
    sender_domains=("fedex.com", "fedex.in"),
    order_id_rules=(
        labelled_id_rule(
            "fedex_tracking_label",
            r"\d{12,22}",
            labels=r"track(?:ing)?(?:\s{0,2}(?:id|no\.?|number|#))?|shipment\s{0,2}(?:id|number)?|package\s{0,2}(?:id|number)?",
            priority=95,
        ),
        shape_id_rule("fedex_tracking_shape", r"96\d{20}|\d{20}|\d{14}|\d{12}", priority=70),
    ),
    id_shape=IdentifierShape(
        min_length=10,
        max_length=22,
        allowed=r"\d{12}|\d{14}|\d{15}|\d{20}|96\d{20}|[A-Z0-9]{10,22}",
        exclude=(r"\d{6,10}",),
    ),
    amount_rules=COD_AMOUNT_RULES,
    no_amount_label="Express Service",
    metadata_rules=COURIER_DETAIL_RULES + (
        FieldRule("service_type", rule("fedex_service", r"fedex\s{1,2}(?P<value>express|ground|overnight|priority|international|economy)\b", in_subject=False)),
    ),
)

INDIAPOST = courier_profile(
    PlatformId.INDIAPOST,
    "India Post",
    indicators=("indianpost.gov.in", "indiapost.gov.in", "@indiapost", "india post"),
    sender_domains=("indiapost.gov.in", "indianpost.gov.in"),
    order_id_rules=(
        labelled_id_rule(
            "indiapost_article_label",
            r"[A-Z]{2}\d{9}[A-Z]{2}",
            labels=TRACKING_LABELS + r"|article\s{0,2}(?:no\.?|number)?|registered(?:\s{1,2}post)?|speed\s{1,2}post|parcel",
            priority=95,
        ),
        shape_id_rule("indiapost_article_shape", r"[A-Z]{2}\d{9}[A-Z]{2}", priority=80),
    ),
    id_shape=IdentifierShape(min_length=13, max_length=13, allowed=r"[A-Z]{2}\d{9}[A-Z]{2}"),
    amount_rules=(
        amount_rule("cod_vpp", r"cod|cash\s{1,3}on\s{1,3}delivery|vpp|value\s{1,3}payable\s{1,3}post", 100),
        amount_rule("money_order", r"money\s{1,3}order", 90),
        amount_rule("postage", r"postage|charges", 80),
    ),
    no_amount_label="Postal Service",
    metadata_rules=COURIER_DETAIL_RULES + (
        FieldRule("service_type", rule("indiapost_service", r"\b(?P<value>speed\s{1,2}post|registered\s{1,2}post|express\s{1,2}parcel|business\s{1,2}parcel|ems)\b", in_subject=False)),
        FieldRule("delivery_office", rule("indiapost_office", r"\b(?:delivery\s{1,3}office|post\s{1,3}office)\s{0,3}[:\-]\s{0,3}(?P<value>[^,\n]{5,100})", in_subject=False)),
    ),
)


PROFILES = (
    DELHIVERY,
    ECOMEXPRESS,
    ARAMEX,
    XPRESSBEES,
    TCIEXPRESS,
    SAFEXPRESS,
    GATI,
    BLUEDART,
    DTDC,
    FEDEX,
    INDIAPOST,
)

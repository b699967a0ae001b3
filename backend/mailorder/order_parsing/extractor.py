"""
Order Extractor

One generic extractor that runs a platform's declarative rule table:
gate -> order id -> amount -> status -> metadata -> items -> date ->
confidence -> OrderDraft.

Item extraction falls back through three tiers:
1. Structured line items in the body
2. A single pseudo-item derived from the subject line
3. A synthesized placeholder carrying the order id and amount
so an identified order never comes back with an empty item list.
"""

from datetime import date, datetime
from typing import List, Optional, Tuple

from mailorder.error_tracking import ExtractionOutcome, ExtractionStage, classify_outcome
from mailorder.logging_config import get_logger
from mailorder.models import ExtractionTrace, InboundEmail, LineItem, OrderDraft, OrderStatus
from mailorder.order_parsers.base import IdentifierShape

from .confidence import compute_signals, score
from .filtering import can_handle, check_can_handle
from .normalizer import build_draft
from .toolkit import (
    MAX_MATCHES_PER_RULE,
    AmountCandidate,
    Candidate,
    ItemCollector,
    collect_amounts,
    first_match,
    is_plausible_amount,
    iter_rule_values,
    rank_rules,
    validate_identifier,
    validate_item_name,
    vote_amount,
)
from .utilities import (
    clean_product_name,
    normalize_currency_symbols,
    parse_amount,
    parse_date_text,
    prepare_content,
)

logger = get_logger(__name__)

# Fee lines above this are not fees
MAX_FEE = 500.0

# Shape for tracking ids captured as metadata
TRACKING_ID_SHAPE = IdentifierShape(min_length=8, max_length=25)

MAX_FIELD_LENGTH = 100


def clean_field_value(value: str) -> str:
    cleaned = ' '.join(value.split())
    cleaned = cleaned.strip(' .;:-|')
    return cleaned[:MAX_FIELD_LENGTH].rstrip()


class OrderExtractor:
    """Extractor bound to one PlatformProfile and the engine configuration."""

    def __init__(self, profile, config):
        self.profile = profile
        self.config = config
        self.amount_floor, self.amount_ceiling = config.amount_bounds(profile.amount_category)
        self.currency = profile.currency or config.currency
        self._subject_item_rules = rank_rules(profile.subject_item_rules)

    @property
    def platform(self):
        return self.profile.platform

    def __repr__(self):
        return f"OrderExtractor({self.platform.value})"

    # ========================================================================
    # Gate
    # ========================================================================

    def check_can_handle(self, email: InboundEmail) -> Tuple[bool, str]:
        return check_can_handle(self.profile, email)

    def can_handle(self, email: InboundEmail) -> bool:
        return can_handle(self.profile, email)

    # ========================================================================
    # Field cascades
    # ========================================================================

    def extract_order_id(self, subject: str, content: str) -> Optional[Candidate]:
        shape = self.profile.id_shape
        return first_match(
            self.profile.order_id_rules,
            subject,
            content,
            lambda value: validate_identifier(value, shape),
        )

    def extract_amount(self, subject: str, content: str) -> Optional[AmountCandidate]:
        candidates = collect_amounts(
            self.profile.amount_rules,
            subject,
            content,
            self.amount_floor,
            self.amount_ceiling,
        )
        return vote_amount(candidates)

    def detect_email_type(self, subject: str, content: str) -> str:
        subject_lower = subject.lower()
        content_lower = content.lower()
        for type_rule in self.profile.email_types:
            if any(keyword in subject_lower for keyword in type_rule.subject_keywords):
                return type_rule.email_type
            if any(keyword in content_lower for keyword in type_rule.content_keywords):
                return type_rule.email_type
        return self.profile.default_email_type

    def extract_status(self, subject: str, content: str, email_type: Optional[str] = None) -> Tuple[str, OrderStatus]:
        """
        Email type and mapped status.

        The type maps through the platform's status table; the first
        override whose keyword appears in the body then refines it.
        """
        if email_type is None:
            email_type = self.detect_email_type(subject, content)

        status = self.profile.status_map.get(email_type, OrderStatus.UNKNOWN)
        content_lower = content.lower()
        for override in self.profile.status_overrides:
            if override.email_types and email_type not in override.email_types:
                continue
            if any(keyword in content_lower for keyword in override.keywords):
                status = override.status
                break
        return email_type, status

    def extract_metadata(self, subject: str, content: str) -> Tuple[dict, List[Tuple[str, str]]]:
        """
        Tracking id, seller, delivery window and shipment details.

        Returns:
            Tuple of (fields, fired rules); the first valid value per field wins
        """
        fields = {}
        fired = []
        for field_rule in self.profile.metadata_rules:
            if field_rule.field in fields:
                continue
            for _, value in iter_rule_values(field_rule.rule, subject, content):
                value = clean_field_value(value)
                if len(value) < 2:
                    continue
                if field_rule.field == 'tracking_id' and not validate_identifier(value, TRACKING_ID_SHAPE):
                    continue
                fields[field_rule.field] = value
                fired.append((field_rule.field, field_rule.rule.name))
                break
        return fields, fired

    def extract_items(
        self,
        subject: str,
        content: str,
        order_id: str,
        amount: Optional[float],
        email_type: str,
        fields: Optional[dict] = None,
    ) -> Tuple[List[LineItem], str, str]:
        """
        Line items through the three fallback tiers, plus fee lines.

        Returns:
            Tuple of (items, tier, rule name); tier is "content", "subject"
            or "placeholder"
        """
        collector = ItemCollector(self.config.max_items)
        tier, rule_name = 'placeholder', 'placeholder'

        for pattern in self.profile.item_patterns:
            found = self._match_items(pattern, content)
            if found:
                for item in found:
                    collector.add(item)
                tier, rule_name = 'content', pattern.name
                break

        if not len(collector):
            subject_item = self._subject_item(subject, amount)
            if subject_item is not None:
                item, rule_name = subject_item
                collector.add(item)
                tier = 'subject'
            else:
                collector.add(self._placeholder_item(order_id, amount, email_type, fields or {}))

        if self.profile.fee_pattern is not None:
            self._add_fees(content, collector)

        return collector.items, tier, rule_name

    def extract_date(self, content: str, received_at) -> Tuple[Optional[date], str, Optional[str]]:
        """
        Order date from the body, else the email's receipt date.

        Returns:
            Tuple of (date, source, rule name)
        """
        for rule in rank_rules(self.profile.date_rules):
            for _, value in iter_rule_values(rule, '', content):
                parsed = parse_date_text(value)
                if parsed:
                    return parsed, 'email_body', rule.name

        if isinstance(received_at, datetime):
            return received_at.date(), 'email_received', None
        if isinstance(received_at, date):
            return received_at, 'email_received', None
        return None, 'unavailable', None

    # ========================================================================
    # Item helpers
    # ========================================================================

    def _match_items(self, pattern, content: str) -> List[LineItem]:
        items = []
        for count, match in enumerate(pattern.regex.finditer(content)):
            if count >= MAX_MATCHES_PER_RULE:
                break
            item = self._build_item(pattern, match.groupdict())
            if item is not None:
                items.append(item)
        return items

    def _build_item(self, pattern, groups: dict) -> Optional[LineItem]:
        name = clean_product_name(groups.get('name') or '')
        if not validate_item_name(name, self.profile.item_reject_terms, self.profile.display_name):
            return None

        quantity = int(groups['qty']) if groups.get('qty') else 1
        quantity = max(quantity, 1)

        price = None
        if groups.get('price'):
            price = parse_amount(groups['price'])
            if not is_plausible_amount(price, 0.0, self.amount_ceiling):
                return None

        return LineItem(
            name=name,
            quantity=quantity,
            unit_price=round(price / quantity, 2) if price is not None else None,
            total_price=price,
            item_type=pattern.item_type,
            source='content',
        )

    def _subject_item(self, subject: str, amount: Optional[float]):
        for rule in self._subject_item_rules:
            for _, value in iter_rule_values(rule, subject, ''):
                name = clean_product_name(value)
                if validate_item_name(name, self.profile.item_reject_terms, self.profile.display_name):
                    item = LineItem(
                        name=name,
                        quantity=1,
                        unit_price=amount,
                        total_price=amount,
                        source='subject',
                    )
                    return item, rule.name
        return None

    def _placeholder_item(self, order_id: str, amount: Optional[float], email_type: str, fields: dict) -> LineItem:
        profile = self.profile
        label = profile.type_labels.get(email_type, profile.default_type_label)
        name = profile.placeholder_template.format(
            display_name=profile.display_name,
            label=label,
            order_id=order_id,
            description=fields.get('description') or 'Package',
        )
        if amount is None and profile.is_courier:
            amount = 0.0
        return LineItem(
            name=name,
            quantity=1,
            unit_price=amount,
            total_price=amount,
            source='placeholder',
            tracking_id=order_id if profile.id_is_tracking else None,
            carrier=profile.carrier,
        )

    def _add_fees(self, content: str, collector: ItemCollector) -> None:
        pattern = self.profile.fee_pattern
        for count, match in enumerate(pattern.regex.finditer(content)):
            if count >= MAX_MATCHES_PER_RULE or collector.full:
                break
            name = clean_product_name(match.group('name')).title()
            fee = parse_amount(match.group('price'))
            if fee is None or not 0 < fee < MAX_FEE:
                continue
            collector.add(
                LineItem(
                    name=name,
                    quantity=1,
                    unit_price=fee,
                    total_price=fee,
                    item_type=pattern.item_type,
                    source='content',
                )
            )

    # ========================================================================
    # Pipeline
    # ========================================================================

    def extract(
        self,
        email: InboundEmail,
        trace: Optional[ExtractionTrace] = None,
        content: Optional[str] = None,
    ) -> Optional[OrderDraft]:
        """
        Run the full rule table against one email.

        Args:
            email: Inbound email
            trace: Per-call trace to record decisions into
            content: Prepared body text (computed when omitted)

        Returns:
            OrderDraft, or None when the gate declines or no valid id exists
        """
        profile = self.profile
        if trace is None:
            trace = ExtractionTrace(message_id=email.provider_message_id, platform=self.platform)
        log_extra = {'platform': self.platform.value, 'message_id': email.provider_message_id}

        trace.begin(ExtractionStage.GATE.value)
        accepted, reason = self.check_can_handle(email)
        trace.record(ExtractionStage.GATE.value, reason, accepted=accepted)
        if not accepted:
            trace.outcome = ExtractionOutcome.DECLINED.value
            logger.debug(f"Declined: {reason}", extra=log_extra)
            return None

        if content is None:
            content = prepare_content(email.html_body, email.text_body, self.config.max_content_chars)
        subject = normalize_currency_symbols(email.subject)
        fired_rules = []

        # Order id (hard stop when missing)
        trace.begin(ExtractionStage.ORDER_ID.value)
        id_candidate = self.extract_order_id(subject, content)
        if id_candidate is None:
            trace.record(ExtractionStage.ORDER_ID.value, 'No valid identifier')
            trace.outcome = ExtractionOutcome.NO_IDENTIFIER.value
            logger.debug("No valid identifier", extra=log_extra)
            return None
        order_id = id_candidate.value
        fired_rules.append(('order_id', id_candidate.rule))
        trace.record(
            ExtractionStage.ORDER_ID.value, order_id,
            rule=id_candidate.rule, source=id_candidate.source,
        )

        # Amount
        trace.begin(ExtractionStage.AMOUNT.value)
        amount_candidate = self.extract_amount(subject, content)
        amount = None
        amount_method = 'not_found'
        if amount_candidate is not None:
            amount = amount_candidate.amount
            amount_method = amount_candidate.rule
            fired_rules.append(('amount', amount_candidate.rule))
            trace.record(
                ExtractionStage.AMOUNT.value, f"{amount:.2f}",
                rule=amount_candidate.rule, priority=amount_candidate.priority,
            )
        else:
            trace.record(ExtractionStage.AMOUNT.value, 'No plausible amount')

        # Status
        trace.begin(ExtractionStage.STATUS.value)
        email_type, status = self.extract_status(subject, content)
        trace.record(ExtractionStage.STATUS.value, status.value, email_type=email_type)

        # Metadata
        trace.begin(ExtractionStage.METADATA.value)
        fields, metadata_rules = self.extract_metadata(subject, content)
        trace.record(ExtractionStage.METADATA.value, f"{len(fields)} fields", fields=sorted(fields))

        # Items
        trace.begin(ExtractionStage.ITEMS.value)
        items, item_tier, item_rule = self.extract_items(subject, content, order_id, amount, email_type, fields)
        fired_rules.append(('items', item_rule))
        if amount is None and profile.amount_from_items and item_tier == 'content':
            items_total = round(sum(item.total_price for item in items if item.total_price), 2)
            if is_plausible_amount(items_total, self.amount_floor, self.amount_ceiling):
                amount = items_total
                amount_method = 'items_sum'
        trace.record(ExtractionStage.ITEMS.value, f"{len(items)} items", tier=item_tier, rule=item_rule)

        # Date
        trace.begin(ExtractionStage.DATE.value)
        order_date, date_source, date_rule = self.extract_date(content, email.received_at)
        if date_rule:
            fired_rules.append(('order_date', date_rule))
        trace.record(ExtractionStage.DATE.value, date_source)

        fired_rules.extend(metadata_rules)

        # Confidence
        trace.begin(ExtractionStage.CONFIDENCE.value)
        signals = compute_signals(
            order_id, amount, items, email_type, profile.default_email_type, fields,
        )
        confidence = score(profile.confidence, signals)
        trace.record(ExtractionStage.CONFIDENCE.value, f"{confidence:.2f}")

        trace.begin(ExtractionStage.NORMALIZE.value)
        draft = build_draft(
            profile,
            email,
            order_id=order_id,
            amount=amount,
            currency=self.currency,
            order_date=order_date,
            date_source=date_source,
            status=status,
            items=items,
            item_tier=item_tier,
            confidence=confidence,
            email_type=email_type,
            amount_method=amount_method,
            fields=fields,
            fired_rules=fired_rules,
        )
        trace.outcome = classify_outcome(draft).value
        trace.begin(None)

        logger.info(
            f"Extracted order {order_id} ({status.value}, confidence {confidence:.2f})",
            extra={**log_extra, 'rule': id_candidate.rule},
        )
        return draft

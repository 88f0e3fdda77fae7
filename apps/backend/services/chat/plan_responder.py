"""
Support chatbot responder.

Builds markdown replies from plan table rows. Replies are chosen by an
ordered list of (trigger, builder) branches; a builder may decline by
returning None (e.g. the plans it compares are missing) and the next
branch is tried.

The single piece of conversation state is the previous bot message: when
it asked "Would you like to proceed with purchasing", the next reply is
read as a yes/no answer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

Row = Mapping[str, Any]

PURCHASE_PROMPT = "Would you like to proceed with purchasing"

GREETING = (
    "📱 Hello! I'm your Singtel Assistant. How can I help you today? "
    "I can help you with plans, devices, billing, and more!"
)

OPENERS: Dict[str, str] = {
    "frustrated": "I understand your frustration, and I'm here to help resolve this quickly. ",
    "angry": "I understand your frustration, and I'm here to help resolve this quickly. ",
    "confused": "No worries! Let me break this down for you step by step. ",
    "urgent": "I'll help you find what you need right away. ",
    "price-sensitive": "I'll show you our most cost-effective options. ",
    "happy": "Great to hear! I'm excited to help you find the perfect solution. ",
    "neutral": "I'm happy to help you with that. ",
}

WHY_SINGTEL = (
    "🏆 **WHY CHOOSE SINGTEL?**\n"
    "✅ Best network coverage in Singapore\n"
    "✅ Exclusive entertainment packages (Disney+, Max)\n"
    "✅ Superior customer service\n"
    "✅ Advanced 5G network\n"
    "✅ Comprehensive security features\n\n"
)

PLAN_TABLES: Tuple[Tuple[str, str, int], ...] = (
    ("singtel", "Singtel_Sim_Plans", 15),
    ("starhub", "Starhub_Sim_Plans", 10),
    ("simba", "Simba_Sim_Plans", 10),
    ("mobile", "Mobile_with_SIM", 15),
    ("circles", "CirclesLife_Sim_Plans", 10),
)


@dataclass
class PlanData:
    singtel: List[Row] = field(default_factory=list)
    starhub: List[Row] = field(default_factory=list)
    simba: List[Row] = field(default_factory=list)
    mobile: List[Row] = field(default_factory=list)
    circles: List[Row] = field(default_factory=list)


def opener(emotion: Optional[str]) -> str:
    return OPENERS.get(emotion or "neutral", OPENERS["neutral"])


def _low(row: Row, key: str) -> str:
    return str(row.get(key) or "").lower()


def _has(text: str, *words: str) -> bool:
    return any(w in text for w in words)


# -----------------------------
# Purchase intent
# -----------------------------
def asked_to_purchase(last_bot_text: Optional[str]) -> bool:
    return bool(last_bot_text) and PURCHASE_PROMPT in last_bot_text


def purchase_reply(user_message: str, last_bot_text: str, plans: PlanData) -> str:
    if "yes" not in user_message.lower():
        return (
            "No problem! Is there anything else I can help you with? "
            "I'm here to assist with any questions about our plans, devices, or services."
        )

    last = last_bot_text.lower()
    for plan in plans.singtel:
        name = str(plan.get("Plan Name") or "")
        if name and name.lower() in last and plan.get("Buy_Link"):
            return (
                f"Great choice! 🎉 You can purchase the {name} here: {plan['Buy_Link']}\n\n"
                "Is there anything else I can help you with?"
            )
    return (
        "I'll help you find the right plan. Please visit singtel.com or contact "
        "our sales team for assistance with your purchase."
    )


# -----------------------------
# Branch builders
# -----------------------------
def _star_plan_m(msg: str, plans: PlanData) -> Optional[str]:
    star = next(
        (p for p in plans.starhub
         if "star plan m" in _low(p, "Plan Name")
         or ("150" in str(p.get("Data Allowance") or "") and "22" in str(p.get("Price per Month") or ""))),
        None,
    )
    singtel = next(
        (p for p in plans.singtel
         if "150gb" in _low(p, "Data and Roaming") or "core" in _low(p, "Plan Name")),
        None,
    )
    if not star or not singtel:
        return None

    return (
        "Here's a precise comparison between StarHub Star Plan M and the closest Singtel plan:\n\n"
        "📊 **PLAN COMPARISON TABLE**\n\n"
        "| Feature | StarHub Star Plan M | Singtel Core |\n"
        "|---------|-------------------|-------------|\n"
        f"| **Price** | {star.get('Price per Month') or 'S$22/mth'} | {singtel.get('Price') or 'S$40/mth'} |\n"
        f"| **Data** | {star.get('Data Allowance') or '150GB'} | {singtel.get('Data and Roaming') or '150GB + 1GB Asia Roaming'} |\n"
        f"| **Network** | {star.get('Network Type') or '5G'} | 5G + Priority Network Access |\n"
        f"| **Calls/SMS** | {star.get('Local Calls') or 'Basic'} | {singtel.get('Talktime and SMS') or '700 mins + 700 SMS'} |\n"
        f"| **Entertainment** | None | {singtel.get('Disney+ Offer') or '6 mths Disney+ Premium'} |\n"
        f"| **Security** | None | {singtel.get('McAfee Security') or '6 mths McAfee Mobile Security'} |\n"
        f"| **Roaming** | {star.get('Data Roaming') or 'Extra charges apply'} | 1GB Asia Roaming included |\n\n"
        "🎯 **WHY SINGTEL CORE IS BETTER DESPITE HIGHER PRICE:**\n\n"
        "💰 **Better Value Analysis:**\n"
        "• StarHub: S$22/mth = S$0.147 per GB (150GB only)\n"
        "• Singtel: S$40/mth = S$0.267 per GB BUT includes:\n"
        "  - Asia roaming (worth S$15+/month)\n"
        "  - Disney+ Premium (worth S$11.98/month)\n"
        "  - McAfee Security (worth S$5/month)\n"
        "  - 700 mins calls + 700 SMS (worth S$10+/month)\n\n"
        "📶 **Network Quality:**\n"
        "• Singtel: 99.9% coverage, fastest 5G speeds\n"
        "• StarHub: 98% coverage, slower network speeds\n\n"
        "🎬 **Entertainment Value:**\n"
        "• Singtel: Disney+ Premium included (Marvel, Star Wars, Disney)\n"
        "• StarHub: No entertainment included\n\n"
        "🛡️ **Security & Support:**\n"
        "• Singtel: McAfee protection + 24/7 priority support\n"
        "• StarHub: Basic support only\n\n"
        "💡 **RECOMMENDATION:**\n"
        "While StarHub Star Plan M is cheaper upfront, Singtel Core offers **S$42+ worth of extras** "
        "for just S$18 more per month. You're actually saving money while getting premium services!\n\n"
        f"{PURCHASE_PROMPT} the Singtel Core plan? (Yes/No)"
    )


def _star_plan_l(msg: str, plans: PlanData) -> Optional[str]:
    star = next(
        (p for p in plans.starhub
         if "star plan l" in _low(p, "Plan Name") or "200" in str(p.get("Data Allowance") or "")),
        None,
    )
    singtel = next(
        (p for p in plans.singtel
         if "priority plus" in _low(p, "Plan Name") or "priority" in _low(p, "Data and Roaming")),
        None,
    )
    if not star or not singtel:
        return None

    return (
        "Here's a precise comparison between StarHub Star Plan L and Singtel Priority Plus:\n\n"
        "📊 **PLAN COMPARISON TABLE**\n\n"
        "| Feature | StarHub Star Plan L | Singtel Priority Plus |\n"
        "|---------|-------------------|---------------------|\n"
        f"| **Price** | {star.get('Price per Month') or 'S$32/mth'} | {singtel.get('Price') or 'S$55/mth'} |\n"
        f"| **Data** | {star.get('Data Allowance') or '200GB'} | Priority Network Lane (4X Faster) |\n"
        "| **Network Priority** | Standard | Priority Network Access |\n"
        "| **Customer Support** | Standard | Priority Care (shops, hotline, chat) |\n"
        f"| **Calls/SMS** | Basic | {singtel.get('Talktime and SMS') or '1000 mins + 1000 SMS'} |\n"
        f"| **Caller ID** | Extra charge | {singtel.get('Caller ID') or 'Included'} |\n\n"
        "🚀 **WHY SINGTEL PRIORITY PLUS IS SUPERIOR:**\n\n"
        "⚡ **Network Performance:**\n"
        "• Singtel: 4X faster speeds during peak hours\n"
        "• StarHub: Standard network speeds (can slow during peak)\n\n"
        "🎯 **Priority Benefits:**\n"
        "• Singtel: Jump the queue for support, faster service\n"
        "• StarHub: Standard support wait times\n\n"
        "💡 **VALUE ANALYSIS:**\n"
        "For S$23 more, you get guaranteed faster speeds, priority support, and premium features "
        "that ensure consistent performance.\n\n"
        f"{PURCHASE_PROMPT} the Singtel Priority Plus plan? (Yes/No)"
    )


def _all_providers(msg: str, plans: PlanData) -> str:
    out = "Here's a comprehensive comparison across all major providers:\n\n"
    out += "🔴 **SINGTEL PLANS** (Recommended)\n"
    for p in plans.singtel[:3]:
        out += f"• **{p.get('Plan Name') or 'Plan'}** - {p.get('Price') or 'Contact for pricing'}\n"
        out += f"  Data: {p.get('Data and Roaming') or 'Unlimited'}\n"
        out += f"  Calls: {p.get('Talktime and SMS') or 'Unlimited'}\n"
        if p.get("Disney+ Offer"):
            out += f"  Entertainment: {p['Disney+ Offer']}\n"
        if p.get("McAfee Security"):
            out += f"  Security: {p['McAfee Security']}\n"
        out += "\n"

    if plans.starhub:
        out += "⭐ **STARHUB PLANS**\n"
        for p in plans.starhub[:2]:
            out += f"• **{p.get('Plan Name') or 'Plan'}** - {p.get('Price per Month') or 'Contact for pricing'}\n"
            out += f"  Data: {p.get('Data Allowance') or 'Check with provider'}\n"
            out += f"  Network: {p.get('Network Type') or '4G/5G'}\n\n"

    if plans.simba:
        out += "🦁 **SIMBA PLANS**\n"
        for p in plans.simba[:2]:
            out += f"• **Plan** - {p.get('Price') or 'Contact for pricing'}\n"
            out += f"  Data: {p.get('Data Allowance') or 'Check with provider'}\n"
            out += f"  Duration: {p.get('Duration') or 'Monthly'}\n\n"

    out += WHY_SINGTEL
    out += f"{PURCHASE_PROMPT} any of these Singtel plans? (Yes/No)"
    return out


def _singtel(msg: str, plans: PlanData) -> str:
    out = "Here are our top Singtel plans:\n\n"
    for p in plans.singtel[:4]:
        out += f"**{p.get('Plan Name')}** - {p.get('Price')}\n"
        out += f"• Data: {p.get('Data and Roaming')}\n"
        out += f"• Calls: {p.get('Talktime and SMS')}\n"
        if p.get("Entertainment Package"):
            out += f"• Entertainment: {p['Entertainment Package']}\n"
        out += "\n"
    return out


def _starhub(msg: str, plans: PlanData) -> str:
    out = "Here are StarHub plans for comparison:\n\n"
    for p in plans.starhub[:3]:
        out += f"**{p.get('Plan Name')}** - {p.get('Price per Month')}\n"
        out += f"• Data: {p.get('Data Allowance')}\n"
        out += f"• Network: {p.get('Network Type')}\n\n"
    out += "However, I'd recommend considering Singtel for better coverage and exclusive benefits!"
    return out


def _simba(msg: str, plans: PlanData) -> str:
    out = "Here are Simba plans for comparison:\n\n"
    for p in plans.simba[:3]:
        out += f"**Plan** - {p.get('Price')}\n"
        out += f"• Data: {p.get('Data Allowance')}\n"
        out += f"• Duration: {p.get('Duration')}\n\n"
    out += "While Simba offers competitive pricing, Singtel provides superior network quality and customer support!"
    return out


def _general_plans(msg: str, plans: PlanData) -> str:
    if _has(msg, "unlimited", "data"):
        unlimited = [
            p for p in plans.singtel
            if "unlimited" in _low(p, "Data and Roaming") or "unlimited" in _low(p, "Plan Name")
        ]
        if unlimited:
            out = "Here are our unlimited data plans:\n\n"
            for p in unlimited[:2]:
                out += f"**{p.get('Plan Name')}** - {p.get('Price')}\n"
                out += f"• {p.get('Data and Roaming')}\n"
                out += f"• {p.get('Talktime and SMS')}\n\n"
            return out

        out = "Here are our high-data plans:\n\n"
        for p in plans.singtel[:3]:
            out += f"**{p.get('Plan Name')}** - {p.get('Price')}\n"
            out += f"• {p.get('Data and Roaming')}\n\n"
        return out

    if _has(msg, "cheap", "budget", "affordable"):
        out = "Here are our most affordable plans:\n\n"
        for p in plans.singtel[:2]:
            out += f"**{p.get('Plan Name')}** - {p.get('Price')}\n"
            out += f"• Great value with {p.get('Data and Roaming')}\n"
            out += f"• {p.get('Talktime and SMS')}\n\n"
        if plans.simba:
            out += "For comparison, budget options from other providers:\n"
            out += f"• Simba: {plans.simba[0].get('Price') or 'Check pricing'}\n"
        out += "\nSingtel offers better value with superior network quality!"
        return out

    out = "Here are our popular plans:\n\n"
    for p in plans.singtel[:3]:
        out += f"**{p.get('Plan Name')}** - {p.get('Price')}\n"
        out += f"• {p.get('Data and Roaming')}\n\n"
    return out


def _devices(msg: str, plans: PlanData) -> str:
    out = "We have great mobile devices available:\n\n"
    for d in plans.mobile[:3]:
        out += f"**{d.get('Phone Name')}**\n"
        if d.get("Discount Offer"):
            out += f"• Special offer: {d['Discount Offer']}\n"
        if d.get("Product_Link"):
            out += "• More info: Available\n"
        out += "\n"
    out += "Would you like to see more devices or learn about our mobile plans?"
    return out


def _coverage(msg: str, plans: PlanData) -> str:
    return (
        "Network Coverage Comparison:\n\n"
        "🔴 **SINGTEL**: #1 network in Singapore\n"
        "• 99.9% island-wide coverage\n"
        "• Fastest 5G speeds\n"
        "• Best indoor coverage\n\n"
        "⭐ **STARHUB**: Good coverage\n"
        "• 98% coverage\n"
        "• Decent 5G network\n\n"
        "🦁 **SIMBA**: Uses M1 network\n"
        "• 95% coverage\n"
        "• Limited 5G areas\n\n"
        "Singtel consistently ranks #1 for network quality and coverage!"
    )


def _billing(msg: str, plans: PlanData) -> str:
    return (
        "For billing inquiries:\n\n"
        "• Check your bill online at MySingtel app\n"
        "• Set up auto-payment to avoid late fees\n"
        "• Contact billing support: 1688\n\n"
        "Is there a specific billing issue I can help you with?"
    )


def _network_help(msg: str, plans: PlanData) -> str:
    return (
        "For network issues, try these steps:\n\n"
        "1. Restart your device\n"
        "2. Check if you're in a coverage area\n"
        "3. Update your device settings\n"
        "4. Contact technical support: 1688\n\n"
        "Are you experiencing issues in a specific location?"
    )


def _help(msg: str, plans: PlanData) -> str:
    return (
        "I can help you with:\n\n"
        "📱 Mobile plans and pricing\n"
        "📞 Device recommendations\n"
        "💳 Billing and payments\n"
        "🌐 Network and technical support\n"
        "🎯 Plan comparisons\n\n"
        "What would you like to know more about?"
    )


def _default(msg: str, plans: PlanData) -> str:
    return (
        "I'd be happy to help you with that! Here are some things I can assist with:\n\n"
        "• Compare plans across all providers\n"
        "• Singtel, StarHub, and Simba plan details\n"
        "• Mobile device recommendations\n"
        "• Network coverage information\n"
        "• Billing and technical support\n\n"
        "Could you tell me more about what you're looking for?"
    )


Trigger = Callable[[str], bool]
Builder = Callable[[str, PlanData], Optional[str]]

BRANCHES: Sequence[Tuple[str, Trigger, Builder]] = (
    ("star_plan_m",
     lambda m: "star plan m" in m or ("starhub" in m and "singtel" in m and "compare" in m),
     _star_plan_m),
    ("star_plan_l",
     lambda m: "star plan l" in m or ("starhub" in m and "200gb" in m),
     _star_plan_l),
    ("compare_all",
     lambda m: _has(m, "compare", "vs", "versus", "difference", "all plans", "providers"),
     _all_providers),
    ("singtel", lambda m: "singtel" in m and _has(m, "plan", "sim"), _singtel),
    ("starhub", lambda m: "starhub" in m, _starhub),
    ("simba", lambda m: "simba" in m, _simba),
    ("plans", lambda m: _has(m, "plan", "sim"), _general_plans),
    ("devices", lambda m: _has(m, "phone", "device", "mobile"), _devices),
    ("coverage", lambda m: _has(m, "coverage", "network quality", "signal"), _coverage),
    ("billing", lambda m: _has(m, "bill", "payment", "charge"), _billing),
    ("network_help", lambda m: _has(m, "network", "signal", "internet", "slow"), _network_help),
    ("help", lambda m: _has(m, "help", "support"), _help),
)


def contextual_reply(user_message: str, emotion: str, plans: PlanData) -> Tuple[str, str]:
    """
    Returns (branch name, reply).
    """
    msg = (user_message or "").lower()
    for name, trigger, build in BRANCHES:
        if not trigger(msg):
            continue
        body = build(msg, plans)
        if body is not None:
            return name, opener(emotion) + body
    return "default", opener(emotion) + _default(msg, plans)


def respond(
    user_message: str,
    emotion: str,
    plans: PlanData,
    last_bot_text: Optional[str] = None,
) -> Tuple[str, str]:
    if asked_to_purchase(last_bot_text):
        return "purchase", purchase_reply(user_message, last_bot_text or "", plans)
    return contextual_reply(user_message, emotion, plans)

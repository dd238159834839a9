"""Localized bot copy for the keyword fallback and reply cards.

Every table is keyed by :class:`ChatLanguage`; :func:`localized` picks the
entry for the session language and falls back to English.
"""

from __future__ import annotations

from typing import Final

from src.models.enums import ChatLanguage

EN, HI, HINGLISH = ChatLanguage.EN, ChatLanguage.HI, ChatLanguage.HINGLISH

LocalizedText = dict[ChatLanguage, str]


def localized(table: LocalizedText, language: ChatLanguage | None) -> str:
    return table.get(language or EN) or table[EN]


# ---------------------------------------------------------------------------
# Welcome and menus
# ---------------------------------------------------------------------------

WELCOME_MESSAGE: Final[str] = """\
🏛️ *Welcome to VMC Citizen Services!*

🙏 नमस्ते! I'm your virtual assistant for *Vadodara Municipal Corporation* services.

*Please select your preferred language:*

1️⃣ *English*
2️⃣ *हिंदी (Hindi)*
3️⃣ *Hinglish* (Mixed Hindi-English)

Type *1*, *2*, or *3* to choose.
आप 1, 2, या 3 टाइप करके भाषा चुनें। 🇮🇳"""

MAIN_MENU: Final[LocalizedText] = {
    EN: """\
How can I help you today?

📄 *Pay Bills* - Property Tax, Water, Electricity
📝 *File Complaint* - Roads, Water, Garbage
📋 *Certificates* - Birth, Income, Caste (Info & Links)
🏪 *Licenses* - Shop, Trade, Building (Info & Links)
🔍 *Track Status* - Check your request status
ℹ️ *VMC Info* - Office timings, contacts

Type what you need or choose from above!""",
    HI: """\
मैं आपकी क्या मदद कर सकता/सकती हूं?

📄 *बिल भुगतान* - प्रॉपर्टी टैक्स, पानी, बिजली
📝 *शिकायत दर्ज करें* - सड़क, पानी, कचरा
📋 *प्रमाण पत्र* - जन्म, आय, जाति (जानकारी और लिंक)
🏪 *लाइसेंस* - दुकान, व्यापार, भवन (जानकारी और लिंक)
🔍 *स्थिति जांचें* - अपनी अर्जी की स्थिति देखें
ℹ️ *VMC जानकारी* - ऑफिस समय, संपर्क

जो चाहिए वो टाइप करें!""",
    HINGLISH: """\
Main aapki kaise help kar sakta/sakti hoon?

📄 *Bill Payment* - Property Tax, Pani, Bijli
📝 *Complaint Daalein* - Roads, Pani, Kachra
📋 *Certificates* - Birth, Income, Caste (Info aur Links)
🏪 *Licenses* - Dukaan, Trade, Building (Info aur Links)
🔍 *Status Check* - Apni application ka status dekhein
ℹ️ *VMC Info* - Office timing, contacts

Jo chahiye woh type karein!""",
}

LANGUAGE_SET: Final[LocalizedText] = {
    EN: "✅ *Language set to English!*",
    HI: "✅ *भाषा हिंदी में सेट हो गई!*",
    HINGLISH: "✅ *Language Hinglish mein set ho gayi!*",
}

RESTARTED: Final[LocalizedText] = {
    EN: "🔄 *Starting over.* Your previous draft has been cleared.",
    HI: "🔄 *नई शुरुआत।* आपका पिछला ड्राफ्ट हटा दिया गया है।",
    HINGLISH: "🔄 *Nayi shuruaat.* Aapka pichla draft clear kar diya gaya hai.",
}

DEFAULT_WELCOME: Final[LocalizedText] = {
    EN: "👋 *Welcome to VMC Citizen Services*",
    HI: "👋 *VMC नागरिक सेवाओं में आपका स्वागत है*",
    HINGLISH: "👋 *VMC Citizen Services mein aapka swagat hai*",
}

FOLLOW_UP_MENU: Final[LocalizedText] = {
    EN: """

---
🔄 *Need anything else?*

📄 Pay Bills | 📝 File Complaint | 📋 Certificates | 🏪 Licenses | ℹ️ VMC Info

Type what you need!""",
    HI: """

---
🔄 *कुछ और मदद चाहिए?*

📄 बिल भुगतान | 📝 शिकायत | 📋 प्रमाण पत्र | 🏪 लाइसेंस | ℹ️ VMC जानकारी

जो चाहिए वो टाइप करें!""",
    HINGLISH: """

---
🔄 *Kuch aur help chahiye?*

📄 Bill Payment | 📝 Complaint | 📋 Certificate | 🏪 License | ℹ️ VMC Info

Jo chahiye woh type karein!""",
}

# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------

BILL_MENU: Final[LocalizedText] = {
    EN: """\
💳 *Bill Payment Services*

Select a bill to pay:
• ⚡ Electricity Bill
• 💧 Water Bill
• 🏠 Property Tax

Or share your *Consumer Number* directly.""",
    HI: """\
💳 *बिल भुगतान सेवाएं*

कौन सा बिल भरना है:
• ⚡ बिजली बिल
• 💧 पानी बिल
• 🏠 प्रॉपर्टी टैक्स

या सीधे अपना *उपभोक्ता नंबर* भेजें।""",
    HINGLISH: """\
💳 *Bill Payment Services*

Kaunsa bill bharna hai:
• ⚡ Bijli Bill
• 💧 Pani Bill
• 🏠 Property Tax

Ya seedha apna *Consumer Number* bhejein.""",
}

BILL_TYPE_PROMPTS: Final[dict[str, LocalizedText]] = {
    "electricity": {
        EN: "⚡ *Electricity Bill Payment*\n\nPlease share your *Consumer Number* (found on your bill, usually 10-12 digits).",
        HI: "⚡ *बिजली बिल भुगतान*\n\nकृपया अपना *उपभोक्ता नंबर* भेजें (बिल पर लिखा होता है, 10-12 अंक)।",
        HINGLISH: "⚡ *Bijli Bill Payment*\n\nApna *Consumer Number* bhejein (bill par likha hota hai, 10-12 digits).",
    },
    "water": {
        EN: "💧 *Water Bill Payment*\n\nPlease share your *Consumer Number* or *Property ID*.",
        HI: "💧 *पानी बिल भुगतान*\n\nकृपया अपना *उपभोक्ता नंबर* या *प्रॉपर्टी आईडी* भेजें।",
        HINGLISH: "💧 *Pani Bill Payment*\n\nApna *Consumer Number* ya *Property ID* bhejein.",
    },
    "property_tax": {
        EN: "🏠 *Property Tax Payment*\n\nPlease share your *Property ID* (e.g. PROP123456) to check pending dues.",
        HI: "🏠 *प्रॉपर्टी टैक्स भुगतान*\n\nबकाया देखने के लिए अपनी *प्रॉपर्टी आईडी* (जैसे PROP123456) भेजें।",
        HINGLISH: "🏠 *Property Tax Payment*\n\nBakaya check karne ke liye apni *Property ID* (jaise PROP123456) bhejein.",
    },
}

BILL_CHECKING: Final[LocalizedText] = {
    EN: "Checking bill details for Consumer Number: {number}...",
    HI: "उपभोक्ता नंबर {number} के लिए बिल विवरण जांच रहे हैं...",
    HINGLISH: "Consumer Number {number} ka bill check kar rahe hain...",
}

# ---------------------------------------------------------------------------
# Grievances
# ---------------------------------------------------------------------------

GRIEVANCE_CATEGORY_TITLES: Final[dict[str, LocalizedText]] = {
    "roads": {EN: "🛣️ *Road Complaint*", HI: "🛣️ *सड़क शिकायत*", HINGLISH: "🛣️ *Road Complaint*"},
    "water_supply": {
        EN: "💧 *Water Supply Complaint*",
        HI: "💧 *पानी आपूर्ति शिकायत*",
        HINGLISH: "💧 *Pani Supply Complaint*",
    },
    "garbage": {EN: "🗑️ *Garbage Complaint*", HI: "🗑️ *कचरा शिकायत*", HINGLISH: "🗑️ *Kachra Complaint*"},
    "street_lights": {
        EN: "💡 *Street Light Complaint*",
        HI: "💡 *स्ट्रीट लाइट शिकायत*",
        HINGLISH: "💡 *Street Light Complaint*",
    },
    "drainage": {
        EN: "🌊 *Drainage/Sewerage Complaint*",
        HI: "🌊 *नाली/सीवर शिकायत*",
        HINGLISH: "🌊 *Drainage/Gutter Complaint*",
    },
    "other": {EN: "📌 *Other Complaint*", HI: "📌 *अन्य शिकायत*", HINGLISH: "📌 *Other Complaint*"},
}

GRIEVANCE_CATEGORY_MENU: Final[LocalizedText] = {
    EN: """\
📝 *File a Complaint*

I can help with:
• 💧 Water Supply
• 🛣️ Roads / Potholes
• 🗑️ Garbage
• 💡 Street Lights
• 🌊 Drainage
• 📌 Other Issues

Which one is it?""",
    HI: """\
📝 *शिकायत दर्ज करें*

मैं इनमें मदद कर सकता/सकती हूं:
• 💧 पानी आपूर्ति
• 🛣️ सड़क / गड्ढे
• 🗑️ कचरा
• 💡 स्ट्रीट लाइट
• 🌊 नाली
• 📌 अन्य

कौन सी समस्या है?""",
    HINGLISH: """\
📝 *Complaint Daalein*

Main inme help kar sakta/sakti hoon:
• 💧 Pani Supply
• 🛣️ Road / Gaddhe
• 🗑️ Kachra
• 💡 Street Light
• 🌊 Drainage
• 📌 Other

Kaunsi problem hai?""",
}

STREET_LIGHT_HINT: Final[LocalizedText] = {
    EN: "Please mention the *Pole Number* if visible.",
    HI: "अगर दिखे तो *पोल नंबर* भी बताएं।",
    HINGLISH: "Agar dikhe to *Pole Number* bhi batayein.",
}

GRIEVANCE_STEP_PROMPTS: Final[dict[str, LocalizedText]] = {
    "location": {
        EN: "Please share the *Area/Ward name* where the problem is.\n(You can add a landmark too, e.g. \"Ward 5 near SBI\".)",
        HI: "कृपया समस्या वाले *क्षेत्र/वार्ड* का नाम बताएं।\n(आप लैंडमार्क भी जोड़ सकते हैं, जैसे \"Ward 5 near SBI\"।)",
        HINGLISH: "Problem wale *Area/Ward* ka naam batayein.\n(Landmark bhi likh sakte hain, jaise \"Ward 5 near SBI\".)",
    },
    "landmark": {
        EN: "Got it. Please share a *Nearby Landmark*.",
        HI: "जी। कृपया नजदीकी *लैंडमार्क* बताएं।",
        HINGLISH: "Ok. Ab nearby *Landmark* batayein.",
    },
    "description": {
        EN: "Noted. Please briefly *describe the problem* (you'll be asked for a photo next).",
        HI: "धन्यवाद। कृपया *समस्या का विवरण* दें (फोटो अगला है)।",
        HINGLISH: "Note kar liya. Please *problem describe* karein (photo next step mein).",
    },
    "photo": {
        EN: "🛑 *Photo Required*\n\nPlease attach a *photo* of the issue.\nWe cannot register the complaint without it.",
        HI: "🛑 *फोटो अनिवार्य है*\n\nकृपया समस्या की फोटो भेजें। इसके बिना हम शिकायत दर्ज नहीं कर सकते।",
        HINGLISH: "🛑 *Photo Mandatory hai*\n\nPlease issue ka photo bhejein. Uske bina complaint register nahi hogi.",
    },
}

ATTACHMENT_NOT_TEXT: Final[LocalizedText] = {
    EN: "📎 Thanks, I've saved your attachment.",
    HI: "📎 धन्यवाद, आपकी फाइल सेव कर ली गई है।",
    HINGLISH: "📎 Thanks, aapki file save kar li hai.",
}

GRIEVANCE_REGISTERING: Final[LocalizedText] = {
    EN: "Thank you. I've received the photo. Registering your complaint now...",
    HI: "धन्यवाद। मैंने फोटो प्राप्त कर ली है। आपकी शिकायत दर्ज की जा रही है...",
    HINGLISH: "Thank you. Photo mil gaya. Complaint register ho rahi hai...",
}

# ---------------------------------------------------------------------------
# Status tracking
# ---------------------------------------------------------------------------

STATUS_PROMPT: Final[LocalizedText] = {
    EN: "🔍 *Track Request*\n\nPlease enter your *Grievance ID* (GRxxxxx) or *Application ID* (APPxxxxx) to check status.",
    HI: "🔍 *स्थिति जांचें*\n\nकृपया अपनी *शिकायत आईडी* (GRxxxxx) या *आवेदन आईडी* (APPxxxxx) भेजें।",
    HINGLISH: "🔍 *Status Check*\n\nApni *Grievance ID* (GRxxxxx) ya *Application ID* (APPxxxxx) bhejein.",
}

STATUS_CHECKING_GRIEVANCE: Final[LocalizedText] = {
    EN: "🔍 Checking status for Grievance *{id}*...",
    HI: "🔍 शिकायत *{id}* की स्थिति देख रहे हैं...",
    HINGLISH: "🔍 Grievance *{id}* ka status check kar rahe hain...",
}

STATUS_CHECKING_APPLICATION: Final[LocalizedText] = {
    EN: "🔍 Checking status for Application *{id}*...",
    HI: "🔍 आवेदन *{id}* की स्थिति देख रहे हैं...",
    HINGLISH: "🔍 Application *{id}* ka status check kar rahe hain...",
}

# ---------------------------------------------------------------------------
# Informational answers (certificates, licenses, office)
# ---------------------------------------------------------------------------

CERTIFICATE_INFO: Final[dict[str, str]] = {
    "birth": """\
👶 *Birth Certificate*

*Process:*
1. Apply online (VMC Portal) or at Seva Sadan.
2. Documents: Discharge summary, Parents' Aadhaar & Marriage Certificate.
3. Time: 7-15 days.

🔗 https://vmc.gov.in""",
    "death": """\
⚰️ *Death Certificate*

*Process:*
1. Register the death within 21 days (free).
2. Apply at the Ward Office / Seva Sadan.
3. Documents: Hospital cause-of-death, Cremation receipt, ID proof of applicant.

🔗 https://vmc.gov.in""",
    "income": """\
💰 *Income Certificate* (Revenue Dept)

Apply via the *Digital Gujarat Portal*.
• Documents: Salary slip / IT Return, Ration Card, Aadhaar.
• Issued by the Mamlatdar (not VMC).

🔗 https://digitalgujarat.gov.in""",
    "domicile": """\
🏡 *Domicile Certificate*

Proof of residence in Gujarat for 10+ years.
• Apply: Digital Gujarat Portal.
• Documents: School LC, Ration Card, Electricity Bill (10 yrs), Voter ID.

🔗 https://digitalgujarat.gov.in""",
}

CERTIFICATE_MENU: Final[str] = """\
📋 *Certificate Services*

• 👶 Birth Certificate
• ⚰️ Death Certificate
• 💰 Income Certificate
• 🏡 Domicile Certificate
• 📜 Caste Certificate

Type the name for details."""

LICENSE_INFO: Final[dict[str, str]] = {
    "shop": """\
🏪 *Shop Act / Gumasta License*

*New Registration:*
1. Visit VMC Portal > Shop Establishment.
2. Upload: Rent Agreement/Ownership, PAN, Aadhaar.
3. Pay the fee based on employee count.

🔗 https://vmc.gov.in""",
    "event": """\
🎉 *Event / Plot Booking*

For Community Halls or Party Plots:
1. Check availability on the VMC Portal.
2. Select date & venue.
3. Pay deposit & rent online.
4. Get the confirmation receipt.

🔗 https://vmc.gov.in""",
}

LICENSE_MENU: Final[str] = """\
🏪 *Licenses & Permissions*

• Shop Act (Gumasta)
• Trade License
• Building Permission
• Event/Plot Booking
• Food License (FSSAI)

What do you need?"""

OFFICE_INFO: Final[str] = """\
🏛️ *VMC Contact Info*

☎️ *Helpline:* 1800-233-0265 (Toll Free)
📞 *Control Room:* 0265-2423101
📧 *Email:* info@vmc.gov.in

🕒 *Timings:* 10:30 AM - 6:10 PM (Mon-Sat, excluding holidays)
📍 *Head Office:* Khanderao Market, Vadodara."""

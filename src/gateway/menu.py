# gateway/menu.py
# Navigation tree for st.navigation. "level" hides a page below that user level;
# "feature" is the quota key the page gates on (None = not gated).
MENU = [
    {"section": "Account", "pages": [
        {"label": "Sign in / Sign up", "path": "pages/1_auth_login.py", "icon": "🔑"},
        {"label": "Reset password", "path": "pages/2_auth_reset.py", "icon": "🔁"},
        {"label": "Upgrade plan", "path": "pages/16_upgrade.py", "icon": "💳"},
    ]},

    {"section": "AI Tools", "pages": [
        {"label": "AI Mind Map", "path": "pages/3_mindmap.py", "icon": "🧠", "feature": "mind_map_maker"},
        {"label": "AI Chatbot", "path": "pages/4_ai_chatbot.py", "icon": "💬", "feature": "ai_chatbot"},
        {"label": "AI Peer-Review", "path": "pages/5_ai_peer_review.py", "icon": "📝", "feature": "ai_peer_review"},
        {"label": "Explore GEMINI", "path": "pages/6_explore_gemini.py", "icon": "✨", "feature": "explore_gemini"},
    ]},

    {"section": "Clinical Reference", "pages": [
        {"label": "Drug Reference", "path": "pages/7_drug_reference.py", "icon": "💊", "feature": "drug_reference"},
        {"label": "Interaction Checker", "path": "pages/8_interaction_checker.py", "icon": "⚠️",
         "feature": "interaction_checker"},
        {"label": "Disease Library", "path": "pages/9_disease_library.py", "icon": "📚", "feature": "disease_library"},
        {"label": "Clinical Guidelines", "path": "pages/10_clinical_guidelines.py", "icon": "📑",
         "feature": "clinical_guidelines"},
        {"label": "Nutrition Database", "path": "pages/11_nutrition_database.py", "icon": "🥗",
         "feature": "nutrition_database"},
    ]},

    {"section": "Calculators", "pages": [
        {"label": "Clinical Scoring Hub", "path": "pages/12_clinical_scores.py", "icon": "🧮",
         "feature": "clinical_scoring"},
        {"label": "Renal Calculators", "path": "pages/13_renal_calculators.py", "icon": "🩺",
         "feature": "medical_calculator"},
    ]},

    {"section": "Nucleus", "pages": [
        {"label": "Archive", "path": "pages/14_nucleus_archive.py", "icon": "🗞️"},
        {"label": "Submit an idea", "path": "pages/15_nucleus_submit.py", "icon": "💡"},
    ]},

    {"section": "Admin", "pages": [
        {"label": "Dashboard", "path": "pages/17_admin_dashboard.py", "icon": "🛠️", "level": "Administrator"},
    ]},
]


def iter_pages():
    for section in MENU:
        for page in section["pages"]:
            yield section["section"], page

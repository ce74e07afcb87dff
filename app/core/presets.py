"""
Default site configuration and the business presets an admin can apply.
"""

_NO_SOCIAL_LINKS = {"facebook": "", "instagram": "", "twitter": "", "linkedin": ""}

DEFAULT_CONFIGURATION = {
    "branding": {
        "company_name": "Studio Manager",
        "logo_url": "/logo.svg",
        "favicon_url": "/favicon.ico",
        "primary_color": "#1e40af",
        "secondary_color": "#047857",
        "accent_color": "#f97316",
    },
    "content": {
        "hero_title": "Welcome to Studio Manager",
        "hero_subtitle": "Professional studio management platform",
        "about_us_short": "Manage your studio with ease",
        "seo_title": "Studio Manager",
        "seo_description": "Professional studio management platform",
        "footer_copyright": "© Studio Manager. All rights reserved.",
        "social_links": _NO_SOCIAL_LINKS,
    },
}

BUSINESS_PRESETS = {
    "fittech": {
        "branding": {
            "company_name": "FitTech EMS Studio",
            "logo_url": "/logo.svg",
            "favicon_url": "/favicon.ico",
            "primary_color": "#1e40af",
            "secondary_color": "#047857",
            "accent_color": "#f97316",
        },
        "content": {
            "hero_title": "Transform Your Health with EMS Technology",
            "hero_subtitle": "Experience the future of fitness with Electrical Muscle Stimulation training",
            "about_us_short": "FitTech EMS Studio uses EMS technology to help you reach your health goals efficiently and safely.",
            "seo_title": "FitTech EMS Studio - EMS Fitness Training",
            "seo_description": "EMS training studio offering personalised electrical muscle stimulation sessions.",
            "footer_copyright": "© FitTech EMS Studio. All rights reserved.",
            "social_links": _NO_SOCIAL_LINKS,
        },
    },
    "pilates": {
        "branding": {
            "company_name": "Pure Pilates Studio",
            "logo_url": "/logo.svg",
            "favicon_url": "/favicon.ico",
            "primary_color": "#8b5cf6",
            "secondary_color": "#ec4899",
            "accent_color": "#14b8a6",
        },
        "content": {
            "hero_title": "Discover Your Strength Through Pilates",
            "hero_subtitle": "Mindful movement, core strength and total body wellness",
            "about_us_short": "Pure Pilates Studio offers classical and contemporary Pilates for all levels.",
            "seo_title": "Pure Pilates Studio - Pilates Classes",
            "seo_description": "Pilates studio offering group classes and private sessions.",
            "footer_copyright": "© Pure Pilates Studio. All rights reserved.",
            "social_links": _NO_SOCIAL_LINKS,
        },
    },
    "medspa": {
        "branding": {
            "company_name": "Rejuvenate Med Spa",
            "logo_url": "/logo.svg",
            "favicon_url": "/favicon.ico",
            "primary_color": "#059669",
            "secondary_color": "#dc2626",
            "accent_color": "#7c3aed",
        },
        "content": {
            "hero_title": "Rejuvenate Your Natural Beauty",
            "hero_subtitle": "Aesthetic treatments in a medically supervised environment",
            "about_us_short": "Rejuvenate Med Spa combines medical expertise with spa treatments.",
            "seo_title": "Rejuvenate Med Spa - Aesthetic Treatments",
            "seo_description": "Medical spa offering aesthetic treatments and wellness therapies.",
            "footer_copyright": "© Rejuvenate Med Spa. All rights reserved.",
            "social_links": _NO_SOCIAL_LINKS,
        },
    },
}

CONFIGURATION_KEYS = tuple(DEFAULT_CONFIGURATION.keys())

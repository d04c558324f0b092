# Site-specific CSS selectors. These track LinkedIn's markup and are the
# first thing to update after a redesign; nothing else should hard-code them.

LOGIN = {
    "button": "p.login > a, a[title='Sign in'], a.authwall-join-form__form-toggle--bottom",
    "email": "#login-email, #username",
    "password": "#login-password, #password",
    "submit": "#login-submit, button[aria-label='Sign in'], button[type='submit']",
}

AUTHWALL = [
    ".authwall-join-form",
    "form.authwall-join-form",
    "[data-test-id='join-form']",
    "[data-test-id='header-join']",
]

PROFILE = {
    "landmark": "section.pv-profile-section",
    "summary_toggle": "button.pv-top-card-section__summary-toggle-button",
    "company_marker": "span.pv-top-card-v2-section__company-name",
    "experience_section": "#experience-section",
    "name": "h1.pv-top-card-section__name",
    "headline": "h2.pv-top-card-section__headline",
    "location": "h3.pv-top-card-section__location",
    "summary": "p.pv-top-card-section__summary-text",
    "school": "a.pv-top-card-v2-section__link-education span",
    "connections": "span.pv-top-card-v2-section__connections",
    "experience_items": "#experience-section li",
    "experience_company": "span.pv-entity__secondary-title",
    "experience_title": "h3",
    "experience_link": "a.ember-view",
    "related_items": "section.pv-browsemap-section li",
    "related_name": "span.actor-name",
    "related_headline": "p.browsemap-headline",
    "related_link": "a.pv-browsemap-section__member",
}

COMPANY = {
    "show_details": "#org-about-company-module__show-details-btn",
    "details_panel": "div.org-about-company-module__about-us-extra",
    "name": "h1.org-top-card-module__name",
    "industry": "span.company-industries",
    "description": "p.org-about-us-organization-description__text",
    "website": "a.org-about-us-company-module__website",
    "headquarters": "p.org-about-company-module__headquarters",
    "founded": "p.org-about-company-module__founded",
    "company_type": "p.org-about-company-module__company-type",
    "company_size": "p.org-about-company-module__company-staff-count-range",
    "specialties": "p.org-about-company-module__specialities",
    "followers": "span.org-top-card-module__followers-count",
    "members": "a.snackbar-description-see-all-link",
}

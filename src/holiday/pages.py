"""Static holiday page served from S3 while the fleet is on vacation."""

from __future__ import annotations

from datetime import datetime, timezone
from string import Template

SUPPORT_EMAIL = "support@sagebrush.services"
PAGE_TITLE = "We are currently on holiday"

HOLIDAY_PAGE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            max-width: 800px;
            margin: 0 auto;
            padding: 40px 20px;
            background-color: #f5f5f5;
        }
        .container {
            background-color: white;
            border-radius: 8px;
            padding: 40px;
            box-shadow: 0 2px 10px rgba(0,0,0,0.1);
        }
        h1 { color: #2c3e50; margin-bottom: 20px; }
        h2 { color: #34495e; margin-top: 30px; margin-bottom: 15px; }
        .company {
            margin-bottom: 25px;
            padding: 20px;
            background-color: #f8f9fa;
            border-radius: 5px;
        }
        .company h3 { color: #2c3e50; margin-top: 0; }
        .contact {
            background-color: #e8f4f8;
            padding: 20px;
            border-radius: 5px;
            margin-top: 30px;
            text-align: center;
        }
        .contact a { color: #3498db; text-decoration: none; font-weight: bold; }
        .contact a:hover { text-decoration: underline; }
        .emoji { font-size: 48px; text-align: center; margin: 20px 0; }
        .footer {
            text-align: center;
            margin-top: 30px;
            padding-top: 20px;
            border-top: 1px solid #ddd;
            color: #666;
            font-size: 14px;
        }
    </style>
</head>
<body>
    <div class="container">
        <div class="emoji">&#127958;&#65039;</div>
        <h1>$title</h1>

        <p>Thank you for visiting. Our team is taking a well-deserved break to recharge and spend time with loved ones.</p>

        <h2>About Our Organizations</h2>

        <div class="company">
            <h3>Neon Law</h3>
            <p>Neon Law is a law firm PLLC in Nevada. Neon Law only sells bespoke legal services tailored to the needs of our clients. We choose matters that align with our mission to increase love and respect.</p>
        </div>

        <div class="company">
            <h3>Neon Law Foundation</h3>
            <p>Neon Law Foundation is a 501(c)(3) non-profit. It maintains open-source software to keep our systems running in perpetuity and builds a community around inclusion, privacy, and standards that advance access to justice.</p>
        </div>

        <div class="company">
            <h3>Sagebrush Services</h3>
            <p>Sagebrush Services is a Nevada corporation and a trusted partner for the boring but necessary tasks:</p>
            <ul>
                <li>Mailroom: send your mail here and we scan it into our portal.</li>
                <li>Entity Management: file and renew your Nevada and federal forms on time.</li>
                <li>Cap Tables: share the pie with teammates, advisors, and investors.</li>
                <li>Personal Data: track who requests and retains your information.</li>
            </ul>
        </div>

        <div class="contact">
            <p><strong>Need assistance?</strong></p>
            <p>Please contact us at <a href="mailto:$email">$email</a></p>
            <p>We'll respond as soon as we return from holiday.</p>
        </div>

        <div class="footer">
            <p>&copy; $year Neon Law. All rights reserved.</p>
        </div>
    </div>
</body>
</html>
"""
)


def generate_holiday_html(year: int | None = None) -> str:
    """Render the holiday page, stamping the copyright with ``year``."""
    if year is None:
        year = datetime.now(timezone.utc).year
    return HOLIDAY_PAGE.substitute(title=PAGE_TITLE, email=SUPPORT_EMAIL, year=year)

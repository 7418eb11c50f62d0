"""OCR Pro document scanner.

A small web service that forwards uploaded documents to the Azure
Computer Vision Read API, polls for the result and returns the extracted
text, with Google sign-in and Stripe-paid access on top.
"""

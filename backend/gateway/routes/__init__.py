# Routes package init
"""
Event Gateway: API Routes Package
==================================

Route Inventory:
    - auth.py:           POST /signup, POST /login
    - images.py:         POST /uploadImages, POST /image_upload
    - payments.py:       POST /acceptPayment
    - notifications.py:  POST /welcome_email
    - health.py:         GET  /health

Routes stay thin: FastAPI validates the envelope, the route hands the input
to its action, the global exception handlers format failures.
"""

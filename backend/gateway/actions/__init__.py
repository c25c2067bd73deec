# Actions package init
"""
Event Gateway: Actions Layer
=============================

What:  One class per action the gateway serves, sitting between routes (HTTP)
       and collaborator clients (outbound calls).

Action Inventory:
    - Action (abstract):     base.py
    - SignupAction:          auth.py     identity store insert
    - LoginAction:           auth.py     identity store lookup + token
    - UploadImagesAction:    images.py   object storage, batch
    - UploadImageAction:     images.py   object storage, single per user
    - PaymentAction:         payment.py  payment provider
    - WelcomeEmailAction:    welcome.py  mail relay
"""

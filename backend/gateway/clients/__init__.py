# Clients package init
"""
Event Gateway: Collaborator Clients
====================================

One module per external service the gateway calls out to. Each client turns
vendor and transport failures into GatewayError subclasses so that actions
and routes only deal with the application's own exception hierarchy.

Client Inventory:
    - graphql_client.py:  GraphQLClient + IdentityStore (users)
    - image_storage.py:   ImageStorage (Cloudinary)
    - payment_client.py:  PaymentClient (Chapa)
    - mail_client.py:     MailClient (SMTP relay)
"""

"""Orders domain - reconciliation, admin status console and Stripe webhooks"""

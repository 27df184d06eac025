"""
auth — User authentication module.

Provides:
  • Password policy evaluation
  • Password hashing (bcrypt)
  • JWT token creation & verification
  • ``AuthService`` orchestrating register / login
  • Register / Login / Me API routes
"""

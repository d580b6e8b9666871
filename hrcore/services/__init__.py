"""
Service layer package.

Each service module encapsulates one domain of business logic.
Services are the only layer that interacts with models; controllers
(REST or socket handlers living outside this package) call services
and translate the returned ``ServiceResult`` into a response.

Import services as needed::

    from hrcore.services import promotion_service
    result = promotion_service.create_promotion(company_id, payload)
"""
